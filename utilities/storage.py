"""Blob storage collaborator.

Uploads raw bytes to an HTTP blob store (Vercel Blob compatible PUT API) and
hands back a public URL. The rest of the application only ever sees that URL.
"""
import logging
import time
import requests
from config import BLOB_API_URL, BLOB_READ_WRITE_TOKEN
from .errors import UploadError

logger = logging.getLogger(__name__)


def generate_file_path(session_id: str, question_id: str, filename: str, prefix: str = '') -> str:
    timestamp = int(time.time() * 1000)
    extension = filename.rsplit('.', 1)[-1] if '.' in filename else 'bin'
    name = f"{prefix}-{timestamp}" if prefix else str(timestamp)
    return f"interviews/{session_id}/{question_id}/{name}.{extension}"


def upload(data: bytes, path: str, content_type: str = 'application/octet-stream') -> dict:
    if not BLOB_READ_WRITE_TOKEN:
        raise UploadError('BLOB_READ_WRITE_TOKEN not configured on server')
    headers = {
        'authorization': f'Bearer {BLOB_READ_WRITE_TOKEN}',
        'x-content-type': content_type,
        'access': 'public',
    }
    try:
        resp = requests.put(f"{BLOB_API_URL.rstrip('/')}/{path}", headers=headers, data=data, timeout=120)
        resp.raise_for_status()
        body = resp.json()
    except requests.RequestException as e:
        logger.error("Upload of %s failed: %s", path, e)
        raise UploadError('File upload failed') from e
    except ValueError as e:
        raise UploadError('File upload failed: unexpected storage response') from e

    url = body.get('url')
    if not url:
        raise UploadError('File upload failed: storage returned no URL')
    logger.info("Uploaded %s (%d bytes)", path, len(data))
    return {'url': url, 'pathname': body.get('pathname', path), 'size': len(data)}


def upload_video(data: bytes, session_id: str, question_id: str) -> dict:
    path = generate_file_path(session_id, question_id, 'recording.webm', prefix='video')
    return upload(data, path, content_type='video/webm')


def upload_file(data: bytes, session_id: str, question_id: str, original_name: str,
                content_type: str = 'application/octet-stream') -> dict:
    path = generate_file_path(session_id, question_id, original_name or 'upload.bin', prefix='file')
    result = upload(data, path, content_type=content_type)
    result['original_name'] = original_name
    return result
