import logging
from flask import jsonify, request

from popupmail.core.shopify import ShopifyAdminClient, ShopifyAPIError
from popupmail.modules.auth.utils import current_shop
from . import uploads_bp

logger = logging.getLogger(__name__)

STAGED_UPLOADS_CREATE = """
mutation stagedUploadsCreate($input: [StagedUploadInput!]!) {
  stagedUploadsCreate(input: $input) {
    stagedTargets {
      url
      resourceUrl
      parameters {
        name
        value
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

FILE_CREATE = """
mutation fileCreate($files: [FileCreateInput!]!) {
  fileCreate(files: $files) {
    files {
      id
      alt
      ... on MediaImage {
        id
        image {
          url
          originalSrc
        }
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""


def _db_log(level, message, details=None, shop=None):
    """Log to the persistent DB logger"""
    try:
        from popupmail.core import db_log
        db_log(level, 'uploads', message, details, shop)
    except Exception:
        pass


def _staged_upload(client, form):
    variables = {
        'input': [{
            'filename': form.get('filename'),
            'mimeType': form.get('mimeType'),
            'resource': 'IMAGE',
            'httpMethod': 'POST',
            'fileSize': form.get('fileSize'),
        }]
    }
    try:
        data = client.graphql(STAGED_UPLOADS_CREATE, variables)
    except ShopifyAPIError as e:
        logger.error(f"Staged upload error: {e}")
        _db_log('error', 'Staged upload failed', {'error': str(e)}, client.shop)
        return jsonify({'error': 'Failed to create upload target'}), 500

    result = data.get('stagedUploadsCreate') or {}
    user_errors = result.get('userErrors') or []
    if user_errors:
        return jsonify({'error': user_errors[0].get('message')}), 400

    targets = result.get('stagedTargets') or []
    if not targets:
        return jsonify({'error': 'Failed to create upload target'}), 500

    target = targets[0]
    return jsonify({
        'uploadUrl': target.get('url'),
        'resourceUrl': target.get('resourceUrl'),
        'parameters': target.get('parameters') or [],
    }), 200


def _create_file(client, form):
    resource_url = form.get('resourceUrl')
    variables = {
        'files': [{
            'originalSource': resource_url,
            'alt': form.get('filename'),
            'contentType': 'IMAGE',
        }]
    }
    try:
        data = client.graphql(FILE_CREATE, variables)
    except ShopifyAPIError as e:
        logger.error(f"File create error: {e}")
        _db_log('error', 'File create failed', {'error': str(e)}, client.shop)
        return jsonify({'error': 'Failed to create file'}), 500

    result = data.get('fileCreate') or {}
    user_errors = result.get('userErrors') or []
    if user_errors:
        return jsonify({'error': user_errors[0].get('message')}), 400

    files = result.get('files') or []
    file = files[0] if files else {}
    # Shopify may still be processing the image, fall back to the staged URL
    image = file.get('image') or {}
    image_url = image.get('url') or image.get('originalSrc') or resource_url

    _db_log('info', 'Image uploaded', {'file_id': file.get('id')}, client.shop)
    return jsonify({
        'success': True,
        'fileId': file.get('id'),
        'imageUrl': image_url,
    }), 200


@uploads_bp.route('/upload', methods=['POST'])
def upload():
    """Two-step Shopify Files upload for campaign images"""
    shop = current_shop()
    if not shop:
        return jsonify({'error': 'Unauthorized'}), 401

    intent = request.form.get('intent')
    if intent not in ('getStagedUpload', 'createFile'):
        return jsonify({'error': 'Invalid intent'}), 400

    try:
        client = ShopifyAdminClient.for_shop(shop)
    except ShopifyAPIError as e:
        logger.error(f"No Admin API access for {shop}: {e}")
        return jsonify({'error': 'Shop is not installed'}), 401

    if intent == 'getStagedUpload':
        return _staged_upload(client, request.form)
    return _create_file(client, request.form)
