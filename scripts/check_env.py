#!/usr/bin/env python3
"""Report which integrations the current environment can enable."""

import os
import sys

REQUIRED = [
    "SLACK_BOT_TOKEN",
    "SLACK_SIGNING_SECRET",
]

INTEGRATIONS = {
    "llm": ["ANTHROPIC_API_KEY"],
    "jira": ["JIRA_BASE_URL", "JIRA_EMAIL", "JIRA_API_TOKEN", "JIRA_PROJECT_KEY"],
    "confluence": [
        "CONFLUENCE_BASE_URL",
        "CONFLUENCE_API_TOKEN",
        "CONFLUENCE_SPACE_KEY",
    ],
}

OPTIONAL = [
    "SLACK_APP_TOKEN",
    "LLM_MODEL",
    "SUMMARY_CHANNEL_ID",
    "CONFLUENCE_EMAIL",
    "CONFLUENCE_PARENT_PAGE_ID",
]


def main() -> int:
    missing = []
    print("=== Required Environment Variables ===")
    for var in REQUIRED:
        if os.environ.get(var):
            print(f"  {var}: OK")
        else:
            print(f"  {var}: MISSING")
            missing.append(var)

    print("\n=== Integrations ===")
    for name, variables in INTEGRATIONS.items():
        absent = [var for var in variables if not os.environ.get(var)]
        if name == "confluence" and not (
            os.environ.get("CONFLUENCE_EMAIL") or os.environ.get("JIRA_EMAIL")
        ):
            absent.append("CONFLUENCE_EMAIL (or JIRA_EMAIL)")
        if absent:
            print(f"  {name}: disabled (missing {', '.join(absent)})")
        else:
            print(f"  {name}: enabled")

    print("\n=== Optional Environment Variables ===")
    for var in OPTIONAL:
        print(f"  {var}: {'set' if os.environ.get(var) else 'not set'}")

    if missing:
        print(f"\nERROR: Missing required variables: {', '.join(missing)}")
        return 1

    print("\nAll required environment variables are present.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
