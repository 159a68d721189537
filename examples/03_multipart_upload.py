"""
Multipart Upload Example

Uploads a file together with a text field.
"""

import sys

from src.http_exchange import HTTPClient, MultipartBody, Request, checked


def upload(path: str):
    """POST a zip archive and a message as multipart/form-data."""
    print("\n=== Multipart upload ===")

    body = (MultipartBody()
            .add_file("file", path, content_type="application/zip")
            .add_text("message", "This is message 1"))

    with HTTPClient(total_timeout=60) as client:
        result = client.execute(Request("POST", "https://httpbin.org/post", body=body), checked)

    print(f"Status: {result.status_code}")
    print(f"Fields: {result.json().get('form')}")


if __name__ == "__main__":
    upload(sys.argv[1] if len(sys.argv) > 1 else "report.zip")
