import boto3
from botocore.exceptions import ClientError
import os
import logging
import uuid

logger = logging.getLogger(__name__)

S3_CLIENT = None
AWS_REGION = os.getenv('AWS_DEFAULT_REGION', 'ap-south-1')
S3_BUCKET_NAME = os.getenv('S3_BUCKET_NAME', 'fish-billing-payment-proofs')
PROOF_PREFIX = "payment-proofs"


def get_s3_client():
    """Initializes and returns a reusable S3 client."""
    global S3_CLIENT
    if S3_CLIENT is None:
        S3_CLIENT = boto3.client('s3', region_name=AWS_REGION)
        logger.info(f"S3 client initialized for region: {AWS_REGION}")
    return S3_CLIENT


def build_proof_key(tenant_id: str, filename: str) -> str:
    extension = filename.rsplit('.', 1)[-1].lower() if '.' in filename else 'bin'
    return f"{PROOF_PREFIX}/{tenant_id}/{uuid.uuid4().hex}.{extension}"


def generate_presigned_upload_url(tenant_id: str, filename: str, expires_in: int = 3600) -> dict:
    """
    Pre-signed PUT URL for a payment proof image.

    The client uploads straight to S3 and then records the returned ``s3_path`` as the
    payment's ``image_url``.
    """
    s3_key = build_proof_key(tenant_id, filename)
    try:
        url = get_s3_client().generate_presigned_url(
            'put_object',
            Params={'Bucket': S3_BUCKET_NAME, 'Key': s3_key},
            ExpiresIn=expires_in
        )
    except ClientError as e:
        logger.exception(f"Failed to generate presigned upload URL for key: {s3_key}")
        raise RuntimeError(f"Could not generate S3 upload URL: {e}")
    logger.info(f"Generated presigned upload URL for key: {s3_key}")
    return {"upload_url": url, "s3_path": f"s3://{S3_BUCKET_NAME}/{s3_key}"}


def generate_presigned_download_url(tenant_id: str, s3_path: str, expires_in: int = 3600) -> str:
    # A tenant may only read proofs stored under its own prefix
    expected_prefix = f's3://{S3_BUCKET_NAME}/{PROOF_PREFIX}/{tenant_id}/'
    if not s3_path.startswith(expected_prefix):
        raise ValueError(f"Invalid S3 path. Must start with '{expected_prefix}'")

    s3_key = s3_path.replace(f's3://{S3_BUCKET_NAME}/', '', 1)
    try:
        url = get_s3_client().generate_presigned_url(
            'get_object',
            Params={'Bucket': S3_BUCKET_NAME, 'Key': s3_key},
            ExpiresIn=expires_in
        )
    except ClientError as e:
        logger.exception(f"Failed to generate presigned download URL for key: {s3_key}")
        raise RuntimeError(f"Could not generate S3 download URL: {e}")
    logger.info(f"Generated presigned download URL for key: {s3_key}")
    return url
