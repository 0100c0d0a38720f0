"""
Civic Portal terminal front end.

``PortalShell`` wires configuration, storage, one session namespace, the
auth manager and the services together, and exposes the commands used by
both the one-shot CLI and the interactive REPL.

When the session is torn down mid-use:
  - citizen: the reactive auth state asks for credentials right where the
    user is, then the REPL carries on.
  - admin: the reload signal restarts the shell; start-up finds no session
    and shows the login screen.
"""

import shlex
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import FileHistory
from rich.console import Console
from rich.prompt import Prompt

from civicportal import display
from civicportal.auth import AuthManager
from civicportal.comments import CommentThread
from civicportal.config import PortalConfig
from civicportal.endpoints import HEALTH
from civicportal.exceptions import PortalError
from civicportal.logging_config import logger
from civicportal.models import Level, PostType
from civicportal.sequencing import PagedQuery, QueryState
from civicportal.services import PortalServices
from civicportal.session import AuthState, ReloadSignal, admin_namespace, citizen_namespace
from civicportal.storage import FileStorage, KeyValueStorage


SESSION_ENDED = "[yellow]Your session has ended. Please log in again.[/yellow]"


class PortalShell:
    """Commands and REPL for one namespace"""

    def __init__(self, config: PortalConfig, console: Optional[Console] = None,
                 storage: Optional[KeyValueStorage] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.console = console or Console()
        self.storage = storage if storage is not None else FileStorage(config.storage_file)

        self._login_required: Optional[str] = None
        if config.admin:
            self.reload = ReloadSignal()
            self.namespace = admin_namespace(self.storage, self.reload)
        else:
            self.reload = None
            self.auth_state = AuthState()
            self.auth_state.subscribe(self._on_auth_change)
            self.namespace = citizen_namespace(self.storage, self.auth_state)

        self.auth = AuthManager(self.namespace, config, transport)
        self.services = PortalServices(self.auth.client)

        self.issues_query: PagedQuery = PagedQuery(self._fetch_issues, key="issues", size=config.page_size)
        self.current_thread: Optional[CommentThread] = None
        self._running = True

    async def close(self) -> None:
        await self.auth.close()

    # ==================== Session ====================

    def _on_auth_change(self, user: Optional[Dict[str, Any]], reason: Optional[str]) -> None:
        if user is None and reason:
            self._login_required = reason

    def startup(self):
        """Restore the stored session; nothing authenticated is shown without one"""
        profile = self.auth.restore_session()
        if profile is not None:
            logger.info(f"Restored {self.namespace.name} session for {profile.name}")
        return profile

    async def login(self, identifier: Optional[str] = None, password: Optional[str] = None) -> bool:
        if identifier is None:
            identifier = Prompt.ask("[cyan]Email or phone[/cyan]")
        if password is None:
            password = Prompt.ask("[cyan]Password[/cyan]", password=True)
        try:
            success = await self.auth.login(identifier, password)
        except httpx.TransportError as e:
            self.console.print(f"[red]Cannot reach {self.config.api_base_url}: {e}[/red]")
            return False
        if success:
            self._login_required = None
            profile = self.auth.current_profile
            self.console.print(f"[green]Logged in as[/green] [bold]{profile.name if profile else identifier}[/bold]")
            if not self.auth.is_profile_complete:
                self.console.print("[yellow]Your profile is incomplete. Add your location to finish it.[/yellow]")
        else:
            self.console.print("[red]Login failed. Check your credentials.[/red]")
        return success

    async def logout(self) -> None:
        await self.auth.logout()
        self.console.print("[green]Logged out[/green]")

    def show_status(self) -> None:
        self.console.print(display.session_panel(
            self.auth.current_profile if self.auth.is_authenticated else None,
            self.namespace.name,
            self.namespace.get_token(),
            self.config.api_base_url,
        ))

    async def check_server(self) -> bool:
        try:
            response = await self.auth.client.get(HEALTH)
        except httpx.TransportError:
            return False
        return response is not None and response.is_success

    def _ended(self, result) -> bool:
        """True when a service call came back None because the session ended"""
        if result is None:
            self.console.print(SESSION_ENDED)
            return True
        return False

    # ==================== Issues ====================

    async def _fetch_issues(self, state: QueryState):
        status = state.filters.get("status")
        urgency = state.filters.get("urgency")
        if state.search or status or urgency:
            return await self.services.issues.search(
                query=state.search or None, status=status, urgency=urgency,
                page=state.page, size=state.size,
                sort_by=state.sort_by, sort_dir=state.sort_dir,
            )
        return await self.services.issues.list(page=state.page, size=state.size,
                                               sort_by=state.sort_by, sort_dir=state.sort_dir)

    async def show_issues(self, page: Optional[int] = None, search: Optional[str] = None,
                          status: Optional[str] = None, urgency: Optional[str] = None) -> None:
        if search is not None:
            self.issues_query.set_search(search)
        if status is not None:
            self.issues_query.set_filter("status", status.upper())
        if urgency is not None:
            self.issues_query.set_filter("urgency", urgency.upper())
        if page is not None:
            self.issues_query.go_to_page(page)

        result = await self.issues_query.fetch()
        if self._ended(result):
            return
        self.console.print(display.issues_table(result))

    async def show_issue(self, issue_id: int) -> None:
        issue = await self.services.issues.get(issue_id)
        if self._ended(issue):
            return
        self.console.print(display.issue_panel(issue))

        profile = self.auth.current_profile
        thread = CommentThread(self.services.comments, issue.id, PostType.ISSUE,
                               user_id=int(profile.id) if profile and profile.id.isdigit() else None)
        tree = await thread.load(size=self.config.page_size)
        if self._ended(tree):
            return
        self.current_thread = thread
        self.console.print(display.comment_tree(thread.tree))

    async def comment(self, text: str) -> None:
        if self.current_thread is None:
            self.console.print("[yellow]Open an issue first: issue <id>[/yellow]")
            return
        if self._ended(await self.current_thread.add_comment(text)):
            return
        self.console.print(display.comment_tree(self.current_thread.tree))

    async def reply(self, comment_id: int, text: str) -> None:
        if self.current_thread is None:
            self.console.print("[yellow]Open an issue first: issue <id>[/yellow]")
            return
        if self._ended(await self.current_thread.reply(comment_id, text)):
            return
        self.console.print(display.comment_tree(self.current_thread.tree))

    async def vote(self, comment_id: int, up: bool) -> None:
        if self.current_thread is None:
            self.console.print("[yellow]Open an issue first: issue <id>[/yellow]")
            return
        if self._ended(await self.current_thread.vote(comment_id, up=up)):
            return
        self.console.print(display.comment_tree(self.current_thread.tree))

    async def like(self, issue_id: int) -> None:
        if self._ended(await self.services.issues.like(issue_id)):
            return
        self.console.print(f"[green]Liked issue #{issue_id}[/green]")

    async def follow(self, issue_id: int) -> None:
        if self._ended(await self.services.issues.follow(issue_id)):
            return
        self.console.print(f"[green]Following issue #{issue_id}[/green]")

    async def escalate(self, issue_id: int, level: str, user_id: Optional[int] = None) -> None:
        issue = await self.services.issues.escalate(issue_id, Level(level.upper()), user_id)
        if self._ended(issue):
            return
        self.console.print(f"[green]Issue #{issue.id} escalated ({issue.status})[/green]")

    # ==================== Other listings ====================

    async def show_topics(self, page: int = 0) -> None:
        result = await self.services.topics.list(page=page, size=self.config.page_size)
        if self._ended(result):
            return
        self.console.print(display.topics_table(result))

    async def show_topic(self, topic_id: int) -> None:
        topic = await self.services.topics.get(topic_id)
        if self._ended(topic):
            return
        replies = await self.services.topics.list_replies(topic_id, size=self.config.page_size)
        if self._ended(replies):
            return
        self.console.print(f"[bold]{topic.title}[/bold]\n{topic.description}\n")
        self.console.print(display.comment_tree(tuple(replies.content), title="Replies"))

    async def show_announcements(self, page: int = 0) -> None:
        result = await self.services.announcements.list(page=page, size=self.config.page_size)
        if self._ended(result):
            return
        self.console.print(display.announcements_table(result))

    async def show_dashboard(self) -> None:
        dashboard = await self.services.dashboard.leader()
        if self._ended(dashboard):
            return
        self.console.print(display.dashboard_view(dashboard))

    async def show_leaders(self, name: Optional[str] = None, page: int = 0) -> None:
        """Admins see leader accounts; citizens get the paged leader directory"""
        if not self.config.admin:
            result = await self.services.leaders.search_directory(name=name, page=page,
                                                                  size=self.config.page_size)
            if self._ended(result):
                return
            self.console.print(display.leaders_table(result.content, caption=display.page_caption(result)))
            return
        if name:
            leaders = await self.services.leaders.search(name=name)
        else:
            leaders = await self.services.leaders.list()
        if self._ended(leaders):
            return
        self.console.print(display.leaders_table(leaders))

    async def show_departments(self, page: int = 0) -> None:
        result = await self.services.departments.list(page=page, size=self.config.page_size)
        if self._ended(result):
            return
        self.console.print(display.departments_table(result))

    # ==================== REPL ====================

    def _commands(self) -> Dict[str, Callable[[List[str]], Awaitable[None]]]:
        return {
            "issues": lambda a: self.show_issues(page=int(a[0]) - 1 if a else None),
            "search": lambda a: self.show_issues(page=0, search=" ".join(a)),
            "filter": lambda a: self.show_issues(page=0, status=a[0] if a else "all",
                                                 urgency=a[1] if len(a) > 1 else None),
            "next": lambda a: self._page_issues(forward=True),
            "prev": lambda a: self._page_issues(forward=False),
            "issue": lambda a: self.show_issue(int(a[0])),
            "comment": lambda a: self.comment(" ".join(a)),
            "reply": lambda a: self.reply(int(a[0]), " ".join(a[1:])),
            "upvote": lambda a: self.vote(int(a[0]), up=True),
            "downvote": lambda a: self.vote(int(a[0]), up=False),
            "like": lambda a: self.like(int(a[0])),
            "follow": lambda a: self.follow(int(a[0])),
            "escalate": lambda a: self.escalate(int(a[0]), a[1], int(a[2]) if len(a) > 2 else None),
            "topics": lambda a: self.show_topics(int(a[0]) - 1 if a else 0),
            "topic": lambda a: self.show_topic(int(a[0])),
            "announcements": lambda a: self.show_announcements(int(a[0]) - 1 if a else 0),
            "dashboard": lambda a: self.show_dashboard(),
            "leaders": lambda a: self.show_leaders(" ".join(a) or None),
            "departments": lambda a: self.show_departments(int(a[0]) - 1 if a else 0),
            "logout": lambda a: self._logout_and_stop(),
        }

    async def _page_issues(self, forward: bool) -> None:
        moved = self.issues_query.next_page() if forward else self.issues_query.previous_page()
        if not moved:
            self.console.print("[dim]No more pages[/dim]")
            return
        await self.show_issues()

    async def _logout_and_stop(self) -> None:
        await self.logout()
        self._running = False

    def _print_help(self) -> None:
        self.console.print(
            "[bold cyan]Commands[/bold cyan]\n"
            "  issues [page]            list issues\n"
            "  search <text>            search issues\n"
            "  filter <status> [urg]    filter issues (all to clear)\n"
            "  next / prev              page through issues\n"
            "  issue <id>               show an issue and its comments\n"
            "  comment <text>           comment on the open issue\n"
            "  reply <id> <text>        reply to a comment\n"
            "  upvote/downvote <id>     vote on a comment\n"
            "  like/follow <id>         like or follow an issue\n"
            "  topics [page], topic <id>\n"
            "  announcements [page]\n"
            "  leaders [name]           find leaders\n"
            "  dashboard, departments [page]   (admin)\n"
            "  escalate <id> <CELL|SECTOR|DISTRICT> [leader id] (admin)\n"
            "  status, logout, help, quit"
        )

    async def _login_screen(self) -> bool:
        """Ask for credentials until a login succeeds; False if the user gave up"""
        self.console.print(f"[bold]Civic Portal[/bold] [dim]({self.namespace.name} login)[/dim]")
        while True:
            try:
                if await self.login():
                    return True
            except (KeyboardInterrupt, EOFError):
                return False

    async def _reload(self) -> bool:
        self.console.print(f"[yellow]{self.reload.last_reason or 'Session ended'}[/yellow]")
        self.current_thread = None
        if self.startup() is None:
            return await self._login_screen()
        return True

    def _start_refresh(self) -> None:
        if self.config.refresh_interval > 0:
            self.auth.start_auto_refresh()

    async def run_interactive(self) -> None:
        if self.startup() is None and not await self._login_screen():
            return

        session = PromptSession(
            history=FileHistory(self.config.history_file),
            auto_suggest=AutoSuggestFromHistory(),
            completer=WordCompleter(list(self._commands()) + ["help", "status", "quit"]),
        )
        self._start_refresh()
        self.show_status()

        commands = self._commands()
        while self._running:
            try:
                line = await session.prompt_async(HTML(f"<b>{self.namespace.name}</b> ❯ "))
            except KeyboardInterrupt:
                self.console.print("[yellow]Use quit to exit or Ctrl+D[/yellow]")
                continue
            except EOFError:
                break

            try:
                parts = shlex.split(line)
            except ValueError as e:
                self.console.print(f"[red]{e}[/red]")
                continue
            if not parts:
                continue
            name, args = parts[0].lower(), parts[1:]

            if name in ("quit", "exit"):
                break
            if name == "help":
                self._print_help()
                continue
            if name in ("status", "whoami"):
                self.show_status()
                continue

            handler = commands.get(name)
            if handler is None:
                self.console.print(f"[red]Unknown command: {name}[/red] (try help)")
                continue

            try:
                await handler(args)
            except (IndexError, ValueError):
                self.console.print(f"[red]Bad arguments for {name}[/red] (try help)")
            except PortalError as e:
                self.console.print(f"[red]{e.message}[/red]")
            except httpx.TransportError as e:
                self.console.print(f"[red]Network error: {e}[/red]")

            if self.reload is not None and self.reload.consume():
                if not await self._reload():
                    break
                self._start_refresh()
            elif self._login_required:
                self.console.print(f"[yellow]{self._login_required}[/yellow]")
                self._login_required = None
                if not await self._login_screen():
                    break
                self._start_refresh()

        self.console.print("[dim]Goodbye[/dim]")


async def run_shell(config: PortalConfig) -> None:
    shell = PortalShell(config)
    try:
        await shell.run_interactive()
    finally:
        await shell.close()
