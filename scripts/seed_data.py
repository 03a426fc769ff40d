#!/usr/bin/env python3
"""
Data seeding script for the MMC Admin API.

Populates a running instance with realistic mock content by calling the API the
same way the admin panel and the public website do: the admin logs in, then
blogs, testimonials, contact submissions and newsletter subscribers are created,
a newsletter PDF is uploaded and a campaign is sent.

Usage:
    python scripts/seed_data.py [--api-url http://localhost:8000] [--dry-run] [--delay 0.1]

    # Quick run with a handful of records per collection
    python scripts/seed_data.py --test
"""

import argparse
import os
import random
import sys
import time
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import httpx
from faker import Faker

fake = Faker()

BLOG_CATEGORIES = [
    "Marketing", "Branding", "Web Design", "Social Media", "SEO", "Content Strategy",
]

BLOG_TAGS = [
    "growth", "design", "strategy", "analytics", "campaigns", "startups",
    "ecommerce", "video", "copywriting", "ux", "automation", "case-study",
]

PROJECT_TYPES = [
    "Website Redesign", "Brand Identity", "SEO Audit", "Social Media Campaign",
    "Product Launch", "Email Marketing",
]

CONTACT_SUBJECTS = [
    "Project inquiry", "Request for a quote", "Partnership proposal",
    "Question about your services", "Support request", "Speaking invitation",
]

# Smallest document most PDF readers will open
MINIMAL_PDF = (
    b"%PDF-1.4\n1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj\n"
    b"2 0 obj<</Type/Pages/Kids[3 0 R]/Count 1>>endobj\n"
    b"3 0 obj<</Type/Page/Parent 2 0 R/MediaBox[0 0 612 792]>>endobj\n"
    b"trailer<</Root 1 0 R>>\n%%EOF\n"
)


class Colors:
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    CYAN = '\033[96m'
    RESET = '\033[0m'
    BOLD = '\033[1m'


class SeedReport:
    """Created and failed counts per record type, plus failed checks."""

    def __init__(self):
        self.created = defaultdict(int)
        self.failed = defaultdict(int)
        self.problems = []

    def record_created(self, entity_type: str):
        self.created[entity_type] += 1

    def record_failed(self, entity_type: str, error: str, status_code: Optional[int] = None):
        self.failed[entity_type] += 1
        detail = f"HTTP {status_code}: {error}" if status_code else error
        self.problems.append(f"[{entity_type}] {detail}")

    def check(self, condition: bool, message: str):
        if not condition:
            self.problems.append(f"Check failed: {message}")
            print(f"{Colors.RED}✗ {message}{Colors.RESET}")

    def print_summary(self) -> int:
        print(f"\n{Colors.BOLD}{Colors.CYAN}Seeded{Colors.RESET}")
        for entity_type in sorted(set(self.created) | set(self.failed)):
            failed = self.failed.get(entity_type, 0)
            note = f" {Colors.RED}({failed} failed){Colors.RESET}" if failed else ""
            print(f"  {entity_type}: {self.created.get(entity_type, 0)}{note}")

        for problem in self.problems[:10]:
            print(f"  {Colors.RED}•{Colors.RESET} {problem}")
        if len(self.problems) > 10:
            print(f"  {Colors.YELLOW}... and {len(self.problems) - 10} more{Colors.RESET}")

        return 1 if self.problems else 0


class DataSeeder:
    """Seeds an MMC Admin API instance over HTTP."""

    def __init__(self, api_url: str, username: str, password: str,
                 dry_run: bool = False, verbose: bool = False, delay: float = 0.1):
        self.api_url = api_url.rstrip('/')
        self.username = username
        self.password = password
        self.dry_run = dry_run
        self.verbose = verbose
        self.delay = delay
        self.client = httpx.Client(timeout=30.0)
        self.stats = SeedReport()

        self.admin_token = None
        self.blogs: List[dict] = []
        self.testimonials: List[dict] = []
        self.submissions: List[dict] = []
        self.subscribers: List[dict] = []

        # Only the first few errors per entity type are printed
        self.error_counts = defaultdict(int)
        self.max_errors_per_type = 3

        print(f"{Colors.BOLD}{Colors.CYAN}MMC Admin Data Seeding Script{Colors.RESET}")
        print(f"API URL: {Colors.CYAN}{self.api_url}{Colors.RESET}")
        print(f"Dry Run: {Colors.YELLOW if dry_run else Colors.GREEN}{dry_run}{Colors.RESET}\n")

    def _make_request(self, method: str, endpoint: str, entity_type: Optional[str] = None, **kwargs) -> Optional[httpx.Response]:
        """Make an HTTP request, printing failures without raising."""
        if self.dry_run and method.upper() not in ['GET', 'HEAD']:
            print(f"{Colors.YELLOW}[DRY RUN]{Colors.RESET} {method} {endpoint}")
            return None

        url = f"{self.api_url}/api{endpoint}"
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            print(f"\n{Colors.RED}Request failed: {method} {endpoint}{Colors.RESET}")
            print(f"{Colors.RED}Error: {str(e)}{Colors.RESET}")
            return None

        if response.status_code >= 400:
            should_log = self.verbose
            if entity_type:
                self.error_counts[entity_type] += 1
                should_log = should_log or self.error_counts[entity_type] <= self.max_errors_per_type

            if should_log:
                try:
                    error_detail = response.json().get("error", response.text[:200])
                except ValueError:
                    error_detail = response.text[:200]
                print(f"\n{Colors.RED}✗ {method} {endpoint} - Status {response.status_code}{Colors.RESET}")
                print(f"  {Colors.YELLOW}Error: {error_detail}{Colors.RESET}")
            elif entity_type and self.error_counts[entity_type] == self.max_errors_per_type + 1:
                print(f"\n{Colors.YELLOW}[Suppressing further {entity_type} errors...]{Colors.RESET}")

        return response

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.admin_token}"} if self.admin_token else {}

    def _log_progress(self, entity_type: str, current: int, total: int):
        percentage = (current / total) * 100
        bar_length = 40
        filled = int(bar_length * current / total)
        bar = '█' * filled + '░' * (bar_length - filled)
        print(f"\r{Colors.CYAN}{entity_type}:{Colors.RESET} [{bar}] {current}/{total} ({percentage:.1f}%)", end='', flush=True)
        if current == total:
            print()

    def _pause(self, index: int, count: int):
        if index < count - 1 and self.delay > 0:
            time.sleep(self.delay)

    def authenticate(self):
        print(f"\n{Colors.BOLD}Step 1: Authenticating Admin{Colors.RESET}")

        response = self._make_request("POST", "/auth/login", entity_type="Login", json={
            "username": self.username,
            "password": self.password,
        })

        if response is not None and response.status_code == 200:
            self.admin_token = response.json()["token"]
            print(f"{Colors.GREEN}✓{Colors.RESET} Admin authenticated")
            self.stats.check(self.admin_token is not None, "Admin token should be set")
        elif self.dry_run:
            print(f"{Colors.YELLOW}⚠{Colors.RESET} Dry run, continuing without a token")
        else:
            self.stats.record_failed("Login", "Authentication failed")
            raise RuntimeError("Failed to authenticate admin. Check credentials and API availability.")

    def seed_blogs(self, count: int = 20):
        print(f"\n{Colors.BOLD}Step 2: Seeding Blogs ({count} posts){Colors.RESET}")

        for i in range(count):
            status = random.choices(["published", "draft", "scheduled"], weights=[6, 3, 1])[0]
            blog_data = {
                "title": fake.sentence(nb_words=6).rstrip("."),
                "excerpt": fake.paragraph(nb_sentences=2),
                "content": "\n\n".join(fake.paragraphs(nb=5)),
                "author": fake.name(),
                "category": random.choice(BLOG_CATEGORIES),
                "tags": random.sample(BLOG_TAGS, k=random.randint(1, 4)),
                "status": status,
                "featured": random.random() < 0.2,
                "readingTime": f"{random.randint(3, 12)} min read",
            }
            if status == "scheduled":
                blog_data["publishDate"] = (datetime.now(timezone.utc) + timedelta(days=random.randint(1, 30))).isoformat()

            response = self._make_request("POST", "/blogs", entity_type="Blog",
                                          json=blog_data, headers=self._auth_headers())
            if response is not None and response.status_code == 201:
                self.blogs.append(response.json()["blog"])
                self.stats.record_created("Blog")
            else:
                self.stats.record_failed("Blog", "Failed to create blog", response.status_code if response else None)

            self._log_progress("Blogs", i + 1, count)
            self._pause(i, count)

        # A few likes and views so the counters are not all zero
        for blog in self.blogs[:5]:
            self._make_request("POST", f"/blogs/{blog['id']}/like", entity_type="Blog Like")
            self._make_request("GET", f"/blogs/{blog['id']}", entity_type="Blog View")

        if not self.dry_run:
            self.stats.check(len(self.blogs) >= count * 0.9, "At least 90% of blogs should be created")

    def seed_testimonials(self, count: int = 15):
        print(f"\n{Colors.BOLD}Step 3: Seeding Testimonials ({count} testimonials){Colors.RESET}")

        for i in range(count):
            testimonial_data = {
                "name": fake.name(),
                "company": fake.company(),
                "position": fake.job()[:150],
                "rating": random.choices([3, 4, 5], weights=[1, 3, 6])[0],
                "testimonial": fake.paragraph(nb_sentences=3),
                "projectType": random.choice(PROJECT_TYPES),
                "source": random.choice(["website", "email", "referral"]),
                "verified": random.random() < 0.5,
                "featured": random.random() < 0.3,
            }

            response = self._make_request("POST", "/testimonials", entity_type="Testimonial",
                                          json=testimonial_data, headers=self._auth_headers())
            if response is not None and response.status_code == 201:
                self.testimonials.append(response.json()["testimonial"])
                self.stats.record_created("Testimonial")
            else:
                self.stats.record_failed("Testimonial", "Failed to create testimonial", response.status_code if response else None)

            self._log_progress("Testimonials", i + 1, count)
            self._pause(i, count)

    def seed_contact_submissions(self, count: int = 25):
        print(f"\n{Colors.BOLD}Step 4: Seeding Contact Submissions ({count} submissions){Colors.RESET}")

        for i in range(count):
            submission_data = {
                "name": fake.name(),
                "email": fake.unique.email(),
                "phone": fake.phone_number()[:30],
                "subject": random.choice(CONTACT_SUBJECTS),
                "message": fake.paragraph(nb_sentences=4),
                "priority": random.choice(["low", "medium", "medium", "high"]),
            }

            # Public endpoint, no token
            response = self._make_request("POST", "/contact-submissions", entity_type="Contact Submission",
                                          json=submission_data)
            if response is not None and response.status_code == 201:
                self.submissions.append(response.json()["submission"])
                self.stats.record_created("Contact Submission")
            else:
                self.stats.record_failed("Contact Submission", "Failed to create submission", response.status_code if response else None)

            self._log_progress("Contact Submissions", i + 1, count)
            self._pause(i, count)

        # Work through part of the inbox
        for submission in self.submissions[: len(self.submissions) // 3]:
            self._make_request("PUT", f"/contact-submissions/{submission['id']}/replied",
                               entity_type="Contact Reply", headers=self._auth_headers())

    def seed_subscribers(self, count: int = 40):
        print(f"\n{Colors.BOLD}Step 5: Seeding Newsletter Subscribers ({count} subscribers){Colors.RESET}")

        for i in range(count):
            subscriber_data = {
                "email": fake.unique.email(),
                "name": fake.name(),
                "source": random.choice(["website", "footer", "landing-page"]),
            }

            response = self._make_request("POST", "/newsletter/subscribers", entity_type="Subscriber",
                                          json=subscriber_data)
            if response is not None and response.status_code in (200, 201):
                self.subscribers.append(response.json()["subscriber"])
                self.stats.record_created("Subscriber")
            else:
                self.stats.record_failed("Subscriber", "Failed to subscribe", response.status_code if response else None)

            self._log_progress("Subscribers", i + 1, count)
            self._pause(i, count)

        for subscriber in self.subscribers[: max(1, len(self.subscribers) // 10)]:
            self._make_request("PUT", f"/newsletter/subscribers/{subscriber['id']}/unsubscribe",
                               entity_type="Unsubscribe", headers=self._auth_headers())

    def seed_newsletter_uploads(self, count: int = 3):
        print(f"\n{Colors.BOLD}Step 6: Uploading Newsletter PDFs ({count} files){Colors.RESET}")

        for i in range(count):
            issue_date = (datetime.now(timezone.utc) - timedelta(days=30 * i)).date()
            form = {
                "name": f"MMC Monthly, {issue_date.strftime('%B %Y')}",
                "category": "monthly",
                "date": issue_date.isoformat(),
            }
            files = {"pdf": (f"mmc-monthly-{issue_date.isoformat()}.pdf", MINIMAL_PDF, "application/pdf")}

            response = self._make_request("POST", "/newsletter/upload", entity_type="Newsletter Upload",
                                          data=form, files=files, headers=self._auth_headers())
            if response is not None and response.status_code == 201:
                self.stats.record_created("Newsletter Upload")
            else:
                self.stats.record_failed("Newsletter Upload", "Failed to upload newsletter", response.status_code if response else None)

            self._log_progress("Newsletter Uploads", i + 1, count)
            self._pause(i, count)

    def send_campaign(self):
        print(f"\n{Colors.BOLD}Step 7: Sending Newsletter Campaign{Colors.RESET}")

        if not self.subscribers and not self.dry_run:
            print(f"{Colors.YELLOW}⚠{Colors.RESET} Skipping campaign (no subscribers)")
            return

        response = self._make_request("POST", "/newsletter/send", entity_type="Campaign", json={
            "subject": f"MMC News: {fake.catch_phrase()}",
            "content": "\n\n".join(fake.paragraphs(nb=3)),
            "sendTo": "all",
        }, headers=self._auth_headers())

        if response is not None and response.status_code == 200:
            print(f"{Colors.GREEN}✓{Colors.RESET} {response.json()['message']}")
            self.stats.record_created("Campaign")
        elif not self.dry_run:
            self.stats.record_failed("Campaign", "Failed to send campaign", response.status_code if response else None)

    def validate(self):
        print(f"\n{Colors.BOLD}Step 8: Validating Statistics{Colors.RESET}")
        if self.dry_run:
            return

        response = self._make_request("GET", "/testimonials/stats/overview", headers=self._auth_headers())
        if response is not None and response.status_code == 200:
            data = response.json()
            self.stats.check(data["totalTestimonials"] >= len(self.testimonials), "Testimonial stats should count seeded rows")

        response = self._make_request("GET", "/contact-submissions/stats/overview", headers=self._auth_headers())
        if response is not None and response.status_code == 200:
            data = response.json()
            self.stats.check(data["totalSubmissions"] >= len(self.submissions), "Contact stats should count seeded rows")

        response = self._make_request("GET", "/newsletter/stats", headers=self._auth_headers())
        if response is not None and response.status_code == 200:
            data = response.json()
            self.stats.check(data["totalSubscribers"] >= len(self.subscribers), "Newsletter stats should count seeded subscribers")
            print(f"{Colors.GREEN}✓{Colors.RESET} Subscription rate: {data['subscriptionRate']}%")

    def run(self, test_mode: bool = False) -> int:
        if test_mode:
            print(f"{Colors.YELLOW}Running in TEST MODE with minimal data{Colors.RESET}\n")
            counts = {"blogs": 5, "testimonials": 4, "submissions": 5, "subscribers": 6, "uploads": 1}
        else:
            counts = {"blogs": 20, "testimonials": 15, "submissions": 25, "subscribers": 40, "uploads": 3}

        try:
            self.authenticate()
            self.seed_blogs(counts["blogs"])
            self.seed_testimonials(counts["testimonials"])
            self.seed_contact_submissions(counts["submissions"])
            self.seed_subscribers(counts["subscribers"])
            self.seed_newsletter_uploads(counts["uploads"])
            self.send_campaign()
            self.validate()
            return self.stats.print_summary()
        except KeyboardInterrupt:
            print(f"\n\n{Colors.YELLOW}Seeding interrupted by user{Colors.RESET}")
            return 1
        except RuntimeError as e:
            print(f"\n\n{Colors.RED}Fatal error during seeding:{Colors.RESET}")
            print(f"{Colors.RED}{str(e)}{Colors.RESET}")
            return 1
        finally:
            self.client.close()


def main():
    parser = argparse.ArgumentParser(description="Seed the MMC Admin API with mock content")
    parser.add_argument(
        "--api-url",
        default=os.getenv("API_URL", "http://localhost:8000"),
        help="Base URL for the API (default: http://localhost:8000)"
    )
    parser.add_argument("--username", default=os.getenv("SUPERUSER_USERNAME", "admin"))
    parser.add_argument("--password", default=os.getenv("SUPERUSER_PASSWORD", "admin123"))
    parser.add_argument("--dry-run", action="store_true", help="Print write requests instead of sending them")
    parser.add_argument("--verbose", action="store_true", help="Show all error messages (default: first 3 per entity type)")
    parser.add_argument("--delay", type=float, default=0.1, help="Delay in seconds between requests (default: 0.1)")
    parser.add_argument("--test", action="store_true", help="Run with a handful of records per collection")

    args = parser.parse_args()

    seeder = DataSeeder(
        api_url=args.api_url,
        username=args.username,
        password=args.password,
        dry_run=args.dry_run,
        verbose=args.verbose,
        delay=args.delay,
    )
    sys.exit(seeder.run(test_mode=args.test))


if __name__ == "__main__":
    main()
