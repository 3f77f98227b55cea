"""
Uploads Module
==============

Campaign images go to the shop's Shopify Files in two steps:
1. getStagedUpload -- ask Shopify for a staged upload target, the browser posts the file there
2. createFile -- turn the staged resource into a file and return its public URL
"""

from flask import Blueprint

uploads_bp = Blueprint('uploads', __name__, url_prefix='/app')

from . import routes
