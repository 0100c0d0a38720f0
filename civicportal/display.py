"""
Terminal rendering for portal records.

Pure functions that turn records into rich renderables; the caller picks
the console to print them on.
"""

from typing import Iterable, Optional, Sequence, Union

from rich.console import Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from civicportal.comments import CommentTree
from civicportal.models import (
    Announcement,
    Department,
    Issue,
    Leader,
    LeaderDashboard,
    LeaderSearchResult,
    Page,
    Topic,
    UserProfile,
)
from civicportal.tokens import token_expires_at


STATUS_STYLES = {
    "RECEIVED": "cyan",
    "ESCALATED": "magenta",
    "WAITING_FOR_USER_RESPONSE": "yellow",
    "OVERDUE": "red",
    "RESOLVED": "green",
    "CLOSED": "dim",
}

URGENCY_STYLES = {
    "LOW": "green",
    "MEDIUM": "yellow",
    "URGENT": "bold red",
}


def _short(text: str, limit: int = 60) -> str:
    text = (text or "").replace("\n", " ")
    return text if len(text) <= limit else text[:limit - 3] + "..."


def _date(value: str) -> str:
    return value[:10] if value else "-"


def page_caption(page: Page) -> str:
    return f"Page {page.number + 1} of {max(page.total_pages, 1)} ({page.total_elements} total)"


def issues_table(page: Page[Issue]) -> Table:
    table = Table(title="Issues", show_header=True, header_style="bold cyan", caption=page_caption(page))
    table.add_column("ID", justify="right")
    table.add_column("Ticket")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Urgency")
    table.add_column("Likes", justify="right")
    table.add_column("Created")

    for issue in page.content:
        status_style = STATUS_STYLES.get(issue.status, "white")
        urgency_style = URGENCY_STYLES.get(issue.urgency, "white")
        table.add_row(
            str(issue.id),
            issue.ticket_id or "-",
            escape(_short(issue.title, 50)),
            f"[{status_style}]{issue.status}[/{status_style}]",
            f"[{urgency_style}]{issue.urgency}[/{urgency_style}]",
            str(issue.likes),
            _date(issue.created_at),
        )
    return table


def issue_panel(issue: Issue) -> Panel:
    lines = [
        f"[bold]{escape(issue.title)}[/bold]",
        "",
        escape(issue.description),
        "",
        f"[dim]Ticket:[/dim] {issue.ticket_id or '-'}   "
        f"[dim]Status:[/dim] {issue.status}   [dim]Urgency:[/dim] {issue.urgency}",
        f"[dim]Category:[/dim] {issue.category or '-'}   "
        f"[dim]Likes:[/dim] {issue.likes}   [dim]Followers:[/dim] {issue.followers}",
    ]
    if not issue.location.is_empty():
        lines.append(f"[dim]Location:[/dim] {escape(issue.location.describe())}")
    if issue.created_by:
        lines.append(f"[dim]Reported by:[/dim] {escape(issue.created_by.name)} on {_date(issue.created_at)}")
    if issue.assigned_to:
        lines.append(f"[dim]Assigned to:[/dim] {escape(issue.assigned_to.name)}")
    return Panel("\n".join(lines), title=f"Issue #{issue.id}", border_style="cyan")


def comment_tree(tree: CommentTree, title: str = "Comments") -> Tree:
    """Render a comment tree with one branch per reply level"""
    root = Tree(f"[bold cyan]{escape(title)}[/bold cyan]")

    def add_nodes(parent, nodes):
        for node in nodes:
            label = Text.assemble(
                (node.author_name, "bold"),
                (f"  #{node.id}  ", "dim"),
                (f"+{node.upvotes}/-{node.downvotes}", "green" if node.score >= 0 else "red"),
                ("\n" + node.content, ""),
            )
            branch = parent.add(label)
            add_nodes(branch, node.children)

    if not tree:
        root.add("[dim]No comments yet[/dim]")
    add_nodes(root, tree)
    return root


def topics_table(page: Page[Topic]) -> Table:
    table = Table(title="Topics", show_header=True, header_style="bold cyan", caption=page_caption(page))
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Tags")
    table.add_column("Votes", justify="right")
    table.add_column("Replies", justify="right")
    table.add_column("Created")

    for topic in page.content:
        table.add_row(
            str(topic.id),
            escape(_short(topic.title, 50)),
            escape(", ".join(f"#{t}" for t in topic.tags[:3])),
            f"+{topic.upvote_count}/-{topic.downvote_count}",
            str(topic.reply_count),
            _date(topic.created_at),
        )
    return table


def announcements_table(page: Page[Announcement]) -> Table:
    table = Table(title="Announcements", show_header=True, header_style="bold cyan",
                  caption=page_caption(page))
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Views", justify="right")
    table.add_column("Ends")
    table.add_column("")

    for item in page.content:
        table.add_row(
            str(item.id),
            escape(_short(item.title, 50)),
            str(item.view_count),
            _date(item.end_time),
            "" if item.has_viewed else "[yellow]new[/yellow]",
        )
    return table


def departments_table(page: Page[Department]) -> Table:
    table = Table(title="Departments", show_header=True, header_style="bold cyan",
                  caption=page_caption(page))
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Kinyarwanda")
    table.add_column("Active")

    for dept in page.content:
        table.add_row(
            str(dept.id),
            escape(dept.name_en),
            escape(dept.name_rw or "-"),
            "[green]yes[/green]" if dept.is_active else "[red]no[/red]",
        )
    return table


def leaders_table(leaders: Sequence[LeaderSearchResult], caption: Optional[str] = None) -> Table:
    table = Table(title="Leaders", show_header=True, header_style="bold cyan", caption=caption)
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Phone")
    table.add_column("Role")
    table.add_column("Level")
    table.add_column("Place")
    table.add_column("Status")

    for leader in leaders:
        table.add_row(
            str(leader.user_id),
            escape(leader.full_name),
            leader.phone_number or "-",
            leader.role or "-",
            leader.leadership_level or "-",
            escape(leader.leadership_place_name or "-"),
            leader.account_status.value if leader.account_status else "-",
        )
    return table


def _metrics_table(title: str, metrics: dict) -> Table:
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")
    for key, value in metrics.items():
        if isinstance(value, float):
            value = f"{value:.1f}"
        table.add_row(key, str(value))
    return table


def dashboard_view(dashboard: LeaderDashboard) -> Panel:
    sections: Iterable = [
        _metrics_table("Issues", dashboard.issue_metrics),
        _metrics_table("Topics", dashboard.topic_metrics),
        _metrics_table("Announcements", dashboard.announcement_metrics),
        _metrics_table("Responses", dashboard.response_metrics),
    ]
    return Panel(Group(*sections), title=f"Dashboard - {escape(dashboard.leader_name)}",
                 border_style="cyan")


def session_panel(profile: Optional[Union[UserProfile, Leader]], namespace_name: str,
                  access_token: Optional[str], api_base_url: str) -> Panel:
    """Who is logged in, where, and until when"""
    if profile is None:
        body = f"[yellow]Not logged in[/yellow] ({namespace_name})\n[dim]Server:[/dim] {api_base_url}"
        return Panel(body, title="Session", border_style="yellow")

    expires = token_expires_at(access_token)
    lines = [
        f"[bold]{escape(profile.name)}[/bold]",
        f"[dim]Session:[/dim] {namespace_name}",
        f"[dim]Email:[/dim] {profile.email or '-'}   [dim]Phone:[/dim] {profile.phone_number or '-'}",
    ]
    if isinstance(profile, Leader):
        lines.append(f"[dim]Level:[/dim] {profile.level}   [dim]Department:[/dim] {escape(profile.department)}")
    elif profile.location and not profile.location.is_empty():
        lines.append(f"[dim]Location:[/dim] {escape(profile.location.describe())}")
    if not profile.is_profile_complete():
        lines.append("[yellow]Profile incomplete[/yellow]")
    lines.append(f"[dim]Token expires:[/dim] {expires.isoformat() if expires else 'unknown'}")
    lines.append(f"[dim]Server:[/dim] {api_base_url}")
    return Panel("\n".join(lines), title="Session", border_style="green")
