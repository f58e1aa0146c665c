#!/usr/bin/env python3
"""Publish a built site to its content bucket and invalidate the distribution."""

import argparse
import logging
import sys

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import ClientError
from dotenv import load_dotenv

from src.publisher import publish_site

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Upload a built static site and invalidate CloudFront"
    )
    parser.add_argument("directory", help="Directory holding the built site")
    parser.add_argument("--bucket", required=True, help="Site or sub-site S3 bucket")
    parser.add_argument(
        "--distribution-id",
        default="",
        help="CloudFront distribution ID (skip invalidation when empty)",
    )
    parser.add_argument("--prefix", default="", help="Key prefix inside the bucket")
    parser.add_argument("--verbose", action="store_true", help="Log every upload")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        uploaded, invalidation_id = publish_site(
            args.directory,
            args.bucket,
            distribution_id=args.distribution_id,
            prefix=args.prefix,
        )
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except (ClientError, S3UploadFailedError) as e:
        logger.error(f"Upload failed: {e}")
        sys.exit(1)

    logger.info(f"Published {uploaded} files to s3://{args.bucket}")
    if invalidation_id:
        logger.info(f"Invalidation: {invalidation_id}")


if __name__ == "__main__":
    main()
