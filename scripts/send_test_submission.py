#!/usr/bin/env python3
"""
Dev helper: send a test contact form submission to the local backend.

Builds a submission (a realistic sample by default), encodes it as JSON or
form data, and POST-s it to the /api/contact endpoint.

Usage
-----
# Basic — sample submission as JSON, targeting localhost:8000
python scripts/send_test_submission.py

# Send as application/x-www-form-urlencoded, like the website form
python scripts/send_test_submission.py --form

# Override individual fields
python scripts/send_test_submission.py --name "Jo Lee" --suburb Footscray \\
    --message "Need a quote for a split system install"

# Send an invalid submission to see the 400 response
python scripts/send_test_submission.py --email not-an-email

# Target a different backend URL
python scripts/send_test_submission.py --url http://staging.example.com

Environment / .env
------------------
CONTACT_API_URL   Default backend base URL (default: http://localhost:8000).

The script loads a .env file from the project root and from backend/.
"""

import argparse
import json
import os
import sys
import textwrap
from pathlib import Path

import httpx
from dotenv import load_dotenv


# ---------------------------------------------------------------------------
# Sample submission
# ---------------------------------------------------------------------------

SAMPLE_SUBMISSION = {
    "name": "Jo Lee",
    "email": "jo@example.com",
    "phone": "0400 123 456",
    "suburb": "Footscray",
    "message": "Need a quote for a split system install",
    "service": "Split System Installation",
    "preferredContact": "Phone",
}


# ---------------------------------------------------------------------------
# Pretty printer
# ---------------------------------------------------------------------------

def _print_response(response: httpx.Response) -> None:
    status = response.status_code
    symbol = "OK" if status == 200 else "FAIL"
    print(f"\n[{symbol}] HTTP {status}")
    try:
        body = response.json()
        print(json.dumps(body, indent=2))
    except ValueError:
        print(response.text or "(empty body)")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> int:
    # scripts/ lives one level below the project root
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    load_dotenv(project_root / "backend" / ".env")

    parser = argparse.ArgumentParser(
        prog="send_test_submission.py",
        description=textwrap.dedent("""\
            Send a test contact form submission to the backend.

            Any field not given on the command line comes from a built-in
            sample submission.
        """),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            Examples:
              python scripts/send_test_submission.py
              python scripts/send_test_submission.py --form
              python scripts/send_test_submission.py --message "too short"
              python scripts/send_test_submission.py --dry-run
        """),
    )
    parser.add_argument(
        "--url",
        default=os.getenv("CONTACT_API_URL", "http://localhost:8000"),
        help="Backend base URL (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--form",
        action="store_true",
        help="Send as form data instead of JSON.",
    )
    for field in ("name", "email", "phone", "suburb", "message", "service"):
        parser.add_argument(f"--{field}", default=None, help=f"Override the {field} field")
    parser.add_argument(
        "--preferred-contact",
        dest="preferredContact",
        default=None,
        help="Override the preferredContact field",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the submission without sending it.",
    )

    args = parser.parse_args()

    submission = dict(SAMPLE_SUBMISSION)
    for field in SAMPLE_SUBMISSION:
        value = getattr(args, field)
        if value is not None:
            submission[field] = value

    endpoint = f"{args.url.rstrip('/')}/api/contact"

    print(f"Endpoint : {endpoint}")
    print(f"Encoding : {'form' if args.form else 'json'}")

    if args.dry_run:
        print("\n[DRY RUN] Submission:")
        print(json.dumps(submission, indent=2))
        return 0

    try:
        if args.form:
            response = httpx.post(endpoint, data=submission, timeout=30)
        else:
            response = httpx.post(endpoint, json=submission, timeout=30)
        _print_response(response)
        return 0 if response.status_code == 200 else 1
    except httpx.ConnectError:
        print(
            f"\nERROR: Could not connect to {endpoint}\n"
            "Is the backend running? Start it with:\n"
            "  cd backend && uvicorn app.main:app --reload",
            file=sys.stderr,
        )
        return 1
    except httpx.HTTPError as exc:
        print(f"\nERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
