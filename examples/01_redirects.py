"""
Redirect Policy Examples

POST to a URL that answers 301: strict mode hands back the 301,
lax mode re-issues the POST to the new location.
"""

from src.http_exchange import HTTPClient, RedirectMode, Request, buffered


def strict_post():
    """Strict: 301 on POST is returned to the caller."""
    print("\n=== Strict POST ===")

    with HTTPClient(base_url="http://localhost:8080") as client:
        result = client.execute(Request("POST", "/short"), buffered)

    print(f"Status: {result.status_code}")
    print(f"Location: {result.location}")


def lax_post():
    """Lax: 301 on POST is followed with POST."""
    print("\n=== Lax POST ===")

    with HTTPClient(base_url="http://localhost:8080", redirect_mode=RedirectMode.LAX) as client:
        result = client.post("/short", body=b"payload")

    print(f"Status: {result.status_code}")
    print(f"Body: {result.text}")
    for hop in result.history:
        print(f"  followed {hop.status_code} from {hop.url}")


def no_redirects():
    """Disabled: every 3xx is returned as is."""
    print("\n=== Redirects disabled ===")

    with HTTPClient(redirect_mode="disabled") as client:
        result = client.get("http://github.com")

    print(f"Status: {result.status_code} -> {result.location}")


if __name__ == "__main__":
    strict_post()
    lax_post()
    no_redirects()
