"""
Timeout Budget Examples

connect / inactivity / total timeouts and how they are reported.
"""

from src.http_exchange import HTTPClient, TimeoutConfig, TimeoutError, TransportError


def total_budget():
    """Total budget covers redirects, headers and the body."""
    print("\n=== Total budget ===")

    timeout = TimeoutConfig(connect=3, inactivity=3, total=5)
    with HTTPClient(timeout=timeout) as client:
        try:
            result = client.get("https://httpbin.org/drip?duration=10&numbytes=10")
            print(f"Status: {result.status_code}")
        except TimeoutError as e:
            print(f"Aborted after {e.timeout}s ({e.timeout_type})")


def inactivity():
    """Inactivity restarts with every packet received."""
    print("\n=== Inactivity ===")

    with HTTPClient(timeout=(3, 2)) as client:
        try:
            client.get("https://httpbin.org/delay/5")
        except TimeoutError as e:
            print(f"No data for {e.timeout}s ({e.timeout_type})")


def transport_failure():
    """DNS and connection failures are TransportError."""
    print("\n=== Transport failure ===")

    with HTTPClient(connect_timeout=2) as client:
        try:
            client.get("http://does-not-exist.invalid/")
        except TransportError as e:
            print(f"{type(e).__name__}: {e} (retryable={e.retryable})")


if __name__ == "__main__":
    total_budget()
    inactivity()
    transport_failure()
