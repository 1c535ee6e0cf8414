from __future__ import annotations
from s3_fetch.core import get_s3_client
from s3_fetch.download import download_tree
from s3_fetch.progress import TqdmProgress

if __name__ == "__main__":
    s3 = get_s3_client(
        aws_access_key_id="AKIA...",
        aws_secret_access_key="...",
        region_name="us-east-1",
    )
    count = download_tree(
        s3,
        bucket="my-bucket",
        prefix="images/",
        dst_root="downloads",
        progress=TqdmProgress(),
        max_workers=4,
    )
    print("Downloaded:", count)
