"""Mint a development access token for the chat endpoints.

Tokens are normally issued by the site's login flow; this is for local
testing against the API without it.

Usage:
    python scripts/issue_token.py 7
    python scripts/issue_token.py 1 --role admin --days 1
"""

import argparse
import sys
from datetime import timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.core.security import create_access_token  # noqa: E402

parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
parser.add_argument("user_id", type=int)
parser.add_argument("--role", default="user", help="account role; 'admin' joins as a support agent")
parser.add_argument("--days", type=int, default=None, help="lifetime in days (default from settings)")
args = parser.parse_args()

expires = timedelta(days=args.days) if args.days is not None else None
print(create_access_token(args.user_id, args.role, expires))
