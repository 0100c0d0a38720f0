#!/usr/bin/env python3
"""
Civic Portal CLI - Main Entry Point

Usage:
    civicportal login                   # Log in (citizen)
    civicportal --admin login           # Log in to the leader/admin console
    civicportal issues                  # List issues
    civicportal issue 42                # Show an issue with its comment thread
    civicportal shell                   # Interactive mode
    civicportal --help                  # Show help
"""

import argparse
import asyncio
import sys

import httpx
from rich.console import Console

from civicportal.config import PortalConfig
from civicportal.exceptions import PortalError
from civicportal.logging_config import setup_logging


# Commands that need a restored session before they run
AUTHENTICATED_COMMANDS = {
    "issues", "issue", "topics", "announcements", "dashboard",
    "leaders", "departments", "escalate",
}


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="civicportal",
        description="Civic Portal - terminal client for the citizen engagement platform",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  civicportal login                        Log in as a citizen
  civicportal --admin login                Log in as a leader
  civicportal status                       Show who is logged in
  civicportal issues --status RECEIVED     Filter issues by status
  civicportal issues --search water        Search issues
  civicportal issue 42                     Show issue 42 and its comments
  civicportal --admin escalate 42 SECTOR   Escalate issue 42 to sector level
  civicportal shell                        Start interactive mode

Sessions:
  Citizen and admin sessions are stored separately in
  ~/.civicportal/storage.json and never affect each other.
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    login_parser = subparsers.add_parser("login", help="Log in")
    login_parser.add_argument("--user", "-u", help="Email or phone number")

    subparsers.add_parser("logout", help="Log out")
    subparsers.add_parser("status", help="Show session status")
    subparsers.add_parser("whoami", help="Show current user info")

    issues_parser = subparsers.add_parser("issues", help="List issues")
    issues_parser.add_argument("--page", type=int, default=1, help="Page number (from 1)")
    issues_parser.add_argument("--search", "-s", help="Search text")
    issues_parser.add_argument("--status", help="Filter by status")
    issues_parser.add_argument("--urgency", help="Filter by urgency")

    issue_parser = subparsers.add_parser("issue", help="Show one issue with comments")
    issue_parser.add_argument("issue_id", type=int)

    topics_parser = subparsers.add_parser("topics", help="List discussion topics")
    topics_parser.add_argument("--page", type=int, default=1)

    announcements_parser = subparsers.add_parser("announcements", help="List announcements")
    announcements_parser.add_argument("--page", type=int, default=1)

    subparsers.add_parser("dashboard", help="Leader dashboard (admin)")

    leaders_parser = subparsers.add_parser("leaders", help="Search leaders (leader accounts with --admin)")
    leaders_parser.add_argument("name", nargs="?", help="Name to search for")

    departments_parser = subparsers.add_parser("departments", help="List departments (admin)")
    departments_parser.add_argument("--page", type=int, default=1)

    escalate_parser = subparsers.add_parser("escalate", help="Escalate an issue (admin)")
    escalate_parser.add_argument("issue_id", type=int)
    escalate_parser.add_argument("level", choices=["CELL", "SECTOR", "DISTRICT", "cell", "sector", "district"])
    escalate_parser.add_argument("--leader", type=int, help="User id of the target leader")

    subparsers.add_parser("shell", help="Start interactive mode")

    parser.add_argument(
        "--admin",
        action="store_true",
        help="Use the leader/admin session instead of the citizen one"
    )

    parser.add_argument(
        "--server-url",
        help="Backend base URL (default: CIVIC_API_BASE_URL or http://localhost:8080)"
    )

    parser.add_argument(
        "--config",
        help="Load configuration from JSON file"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    return parser


def build_config(args: argparse.Namespace) -> PortalConfig:
    config = PortalConfig.load_default()
    if args.config:
        config.load_from_file(args.config)
    if args.server_url:
        config.api_base_url = args.server_url.rstrip("/")
    config.admin = args.admin
    if args.verbose:
        config.verbose = True
        config.log_level = "DEBUG"
    return config


async def run_command(args: argparse.Namespace, config: PortalConfig, console: Console) -> int:
    """Run one non-interactive command; returns the exit code"""
    from civicportal.shell import PortalShell

    shell = PortalShell(config, console)
    try:
        if args.command == "login":
            return 0 if await shell.login(identifier=args.user) else 1

        if args.command == "logout":
            await shell.logout()
            return 0

        shell.startup()

        if args.command in ("status", "whoami"):
            shell.show_status()
            if args.command == "status" and not await shell.check_server():
                console.print(f"[yellow]Server {config.api_base_url} is not reachable[/yellow]")
            return 0

        if args.command in AUTHENTICATED_COMMANDS and not shell.auth.is_authenticated:
            console.print("\n[red]✗ Authentication required[/red]")
            flag = " --admin" if config.admin else ""
            console.print(f"Please log in first: [cyan]civicportal{flag} login[/cyan]")
            return 1

        if args.command == "issues":
            await shell.show_issues(page=max(args.page, 1) - 1, search=args.search,
                                    status=args.status, urgency=args.urgency)
        elif args.command == "issue":
            await shell.show_issue(args.issue_id)
        elif args.command == "topics":
            await shell.show_topics(max(args.page, 1) - 1)
        elif args.command == "announcements":
            await shell.show_announcements(max(args.page, 1) - 1)
        elif args.command == "dashboard":
            await shell.show_dashboard()
        elif args.command == "leaders":
            await shell.show_leaders(args.name)
        elif args.command == "departments":
            await shell.show_departments(max(args.page, 1) - 1)
        elif args.command == "escalate":
            await shell.escalate(args.issue_id, args.level, args.leader)

        return 0 if shell.auth.is_authenticated else 1
    finally:
        await shell.close()


def main():
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args()

    config = build_config(args)
    setup_logging(config.log_level, config.log_file, config.environment)
    console = Console()

    try:
        if args.command in (None, "shell"):
            from civicportal.shell import run_shell
            asyncio.run(run_shell(config))
            sys.exit(0)

        sys.exit(asyncio.run(run_command(args, config, console)))

    except KeyboardInterrupt:
        console.print("\n\nGoodbye!")
        sys.exit(0)
    except httpx.TransportError as e:
        console.print(f"\n[red]❌ Connection Error: {e}[/red]")
        console.print(f"\nThe server at {config.api_base_url} is not available.")
        sys.exit(1)
    except PortalError as e:
        console.print(f"\n[red]❌ {e.message}[/red]")
        if config.verbose:
            console.print(e.to_dict())
        sys.exit(1)


if __name__ == "__main__":
    main()
