#!/usr/bin/env python3
"""
Validation script for URL Shortener service.
Tests the live running service to ensure all functionality works correctly.
"""

import sys
import time
import uuid
import requests
from typing import Optional
from datetime import datetime


class ServiceValidator:
    """Validates URL shortener service functionality."""

    def __init__(self, base_url: str = "http://localhost:8080", timeout: float = 5):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.test_results = []

    def print_header(self, text: str):
        """Print a formatted header."""
        print(f"\n{'='*60}")
        print(f"  {text}")
        print(f"{'='*60}\n")

    def print_test(self, name: str, passed: bool, details: str = ""):
        """Print test result."""
        status = "PASS" if passed else "FAIL"
        self.test_results.append((name, passed))
        print(f"[{status}] {name}")
        if details:
            print(f"       {details}")

    def _unique_code(self, prefix: str = "val") -> str:
        return f"{prefix}{uuid.uuid4().hex[:10]}"

    def _create(self, url: str, custom_code: Optional[str] = None, ttl: Optional[int] = None) -> requests.Response:
        body = {"url": url}
        if custom_code is not None:
            body["custom_code"] = custom_code
        if ttl is not None:
            body["ttl"] = ttl
        return self.session.post(f"{self.base_url}/api/urls", json=body, timeout=self.timeout)

    def _redirect(self, short_code: str) -> requests.Response:
        return self.session.get(
            f"{self.base_url}/{short_code}", allow_redirects=False, timeout=self.timeout
        )

    def _expect_error(self, name: str, response: requests.Response, status_code: int, token: str) -> bool:
        """Check status code and error token of a failure response."""
        try:
            error = response.json().get("error")
        except ValueError:
            error = None
        passed = response.status_code == status_code and error == token
        self.print_test(
            name,
            passed,
            f"Status: {response.status_code}, error: {error} (expected {status_code} {token})",
        )
        return passed

    def test_health_check(self) -> bool:
        """Test health check endpoint."""
        try:
            response = self.session.get(f"{self.base_url}/health", timeout=self.timeout)
            data = response.json()
            is_healthy = (
                response.status_code == 200 and
                data.get("status") == "healthy" and
                data.get("database") == "connected"
            )
            self.print_test("Health Check", is_healthy, f"Status: {response.status_code}, DB: {data.get('database')}")
            return is_healthy
        except Exception as e:
            self.print_test("Health Check", False, f"Error: {e}")
            return False

    def test_create_short_url(self) -> Optional[dict]:
        """Test creating a short URL."""
        try:
            test_url = f"https://example.com/validate/{int(time.time())}"
            response = self._create(test_url)

            if response.status_code == 201:
                data = response.json()
                passed = (
                    data.get("original_url") == test_url and
                    len(data.get("short_code", "")) >= 3 and
                    data.get("expires_at") is None
                )
                self.print_test(
                    "Create Short URL",
                    passed,
                    f"Code: {data.get('short_code')}, URL: {data.get('short_url')}"
                )
                return data if passed else None

            self.print_test("Create Short URL", False, f"Status: {response.status_code}")
            return None
        except Exception as e:
            self.print_test("Create Short URL", False, f"Error: {e}")
            return None

    def test_get_url_info(self, created: dict, expected_count: int) -> bool:
        """Test getting URL information."""
        try:
            response = self.session.get(
                f"{self.base_url}/api/urls/{created['short_code']}", timeout=self.timeout
            )

            if response.status_code == 200:
                data = response.json()
                passed = (
                    data.get("original_url") == created["original_url"] and
                    data.get("access_count") == expected_count
                )
                self.print_test(
                    f"Get URL Info (access_count={expected_count})",
                    passed,
                    f"Access count: {data.get('access_count')}"
                )
                return passed

            self.print_test("Get URL Info", False, f"Status: {response.status_code}")
            return False
        except Exception as e:
            self.print_test("Get URL Info", False, f"Error: {e}")
            return False

    def test_redirect(self, created: dict) -> bool:
        """Test URL redirect functionality."""
        try:
            response = self._redirect(created["short_code"])

            location = response.headers.get("Location", "")
            passed = response.status_code == 301 and location == created["original_url"]
            self.print_test(
                "URL Redirect",
                passed,
                f"Status: {response.status_code}, Location: {location[:50]}"
            )
            return passed
        except Exception as e:
            self.print_test("URL Redirect", False, f"Error: {e}")
            return False

    def test_custom_code(self) -> Optional[str]:
        """Test custom short code functionality."""
        try:
            custom_code = self._unique_code()
            response = self._create("https://github.com/example/repo", custom_code=custom_code)

            passed = response.status_code == 201 and response.json().get("short_code") == custom_code
            self.print_test("Custom Short Code", passed, f"Status: {response.status_code}, Code: {custom_code}")
            return custom_code if passed else None
        except Exception as e:
            self.print_test("Custom Short Code", False, f"Error: {e}")
            return None

    def test_duplicate_custom_code(self, existing_code: str) -> bool:
        """Test duplicate custom code rejection."""
        try:
            response = self._create("https://different-url.com", custom_code=existing_code)
            return self._expect_error("Duplicate Code Rejection", response, 409, "short_code_exists")
        except Exception as e:
            self.print_test("Duplicate Code Rejection", False, f"Error: {e}")
            return False

    def test_invalid_input(self) -> bool:
        """Test invalid URL and short code rejection."""
        try:
            results = [
                self._expect_error("Invalid URL Rejection", self._create("not-a-valid-url"), 400, "invalid_url"),
                self._expect_error(
                    "Invalid Short Code Rejection",
                    self._create("https://example.com", custom_code="a!"),
                    400,
                    "invalid_short_code",
                ),
            ]
            return all(results)
        except Exception as e:
            self.print_test("Invalid Input Rejection", False, f"Error: {e}")
            return False

    def test_ttl_expiry(self) -> bool:
        """Test that a URL with ttl=1 stops redirecting."""
        try:
            response = self._create("https://example.com/expiring", ttl=1)
            if response.status_code != 201 or not response.json().get("expires_at"):
                self.print_test("TTL Expiry", False, f"Create status: {response.status_code}")
                return False

            short_code = response.json()["short_code"]
            time.sleep(2)
            return self._expect_error("TTL Expiry", self._redirect(short_code), 410, "expired")
        except Exception as e:
            self.print_test("TTL Expiry", False, f"Error: {e}")
            return False

    def test_list_urls(self) -> bool:
        """Test URL listing and pagination clamping."""
        try:
            response = self.session.get(
                f"{self.base_url}/api/urls", params={"limit": 1000, "offset": -5}, timeout=self.timeout
            )

            if response.status_code == 200:
                data = response.json()
                passed = (
                    data.get("limit") == 100 and
                    data.get("offset") == 0 and
                    len(data.get("urls", [])) <= 100 and
                    data.get("total", 0) >= len(data.get("urls", []))
                )
                self.print_test("List URLs", passed, f"Total URLs: {data.get('total')}")
                return passed

            self.print_test("List URLs", False, f"Status: {response.status_code}")
            return False
        except Exception as e:
            self.print_test("List URLs", False, f"Error: {e}")
            return False

    def test_delete(self, short_code: str) -> bool:
        """Test deletion and that the code is gone afterwards."""
        try:
            response = self.session.delete(f"{self.base_url}/api/urls/{short_code}", timeout=self.timeout)
            deleted = response.status_code == 204
            self.print_test("Delete Short URL", deleted, f"Status: {response.status_code} (expected 204)")

            gone = self._expect_error("Redirect After Delete", self._redirect(short_code), 404, "not_found")
            return deleted and gone
        except Exception as e:
            self.print_test("Delete Short URL", False, f"Error: {e}")
            return False

    def test_nonexistent_code(self) -> bool:
        """Test accessing non-existent short code."""
        try:
            missing = self._unique_code("missing")
            results = [
                self._expect_error(
                    "Non-existent Code Info",
                    self.session.get(f"{self.base_url}/api/urls/{missing}", timeout=self.timeout),
                    404,
                    "not_found",
                ),
                self._expect_error(
                    "Non-existent Code Delete",
                    self.session.delete(f"{self.base_url}/api/urls/{missing}", timeout=self.timeout),
                    404,
                    "not_found",
                ),
            ]
            return all(results)
        except Exception as e:
            self.print_test("Non-existent Code", False, f"Error: {e}")
            return False

    def run_all_tests(self, include_slow: bool = True) -> bool:
        """Run all validation tests."""
        self.print_header("URL Shortener Service Validation")
        print(f"Testing service at: {self.base_url}")
        print(f"Timestamp: {datetime.now().isoformat()}\n")

        # Basic connectivity
        if not self.test_health_check():
            print("\nHealth check failed. Service may not be running.")
            print(f"   Make sure the service is accessible at {self.base_url}")
            return False

        print()

        # Core lifecycle
        created = self.test_create_short_url()
        if created:
            self.test_get_url_info(created, expected_count=0)
            self.test_redirect(created)
            self.test_get_url_info(created, expected_count=1)
            self.test_delete(created["short_code"])

        print()

        # Custom codes and validation
        custom_code = self.test_custom_code()
        if custom_code:
            self.test_duplicate_custom_code(custom_code)
            self.session.delete(f"{self.base_url}/api/urls/{custom_code}", timeout=self.timeout)

        self.test_invalid_input()
        self.test_nonexistent_code()

        print()

        self.test_list_urls()
        if include_slow:
            self.test_ttl_expiry()

        self.print_summary()

        return all(passed for _, passed in self.test_results)

    def print_summary(self):
        """Print test summary."""
        total = len(self.test_results)
        passed = sum(1 for _, p in self.test_results if p)
        failed = total - passed

        self.print_header("Test Summary")
        print(f"Total Tests:  {total}")
        print(f"Passed:       {passed}")
        print(f"Failed:       {failed}")
        print(f"Success Rate: {(passed/total*100):.1f}%")

        if failed > 0:
            print("\nFailed tests:")
            for name, passed in self.test_results:
                if not passed:
                    print(f"   - {name}")

        print()


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Validate URL Shortener service functionality"
    )
    parser.add_argument(
        "--url",
        default="http://localhost:8080",
        help="Base URL of the service (default: http://localhost:8080)"
    )
    parser.add_argument(
        "--skip-slow",
        action="store_true",
        help="Skip the TTL expiry check (sleeps for 2 seconds)"
    )

    args = parser.parse_args()

    validator = ServiceValidator(args.url)

    try:
        success = validator.run_all_tests(include_slow=not args.skip_slow)
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n\nValidation interrupted by user")
        sys.exit(2)
    except Exception as e:
        print(f"\n\nValidation failed with error: {e}")
        sys.exit(3)


if __name__ == "__main__":
    main()
