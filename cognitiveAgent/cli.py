"""Interactive command-line front end for a cognitive session."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from cognitiveAgent.session.orchestrator import CognitiveOrchestrator
from cognitiveAgent.session.schema import ProcessState

LOGGER = logging.getLogger("cognitiveAgent.cli")


class SnapshotPrinter:
    """Observer that prints streamed answer text and step status changes."""

    def __init__(self) -> None:
        self._printed_text: Dict[str, int] = {}
        self._step_status: Dict[tuple, str] = {}
        self._state: Optional[str] = None

    def __call__(self, snapshot: Dict[str, Any]) -> None:
        state = snapshot["state"]
        if state != self._state:
            self._state = state
            if state in ("Done", "Error", "Cancelled"):
                print(f"\n[{state}]")

        turns = snapshot["turns"]
        model_turns = [t for t in turns if t["role"] == "model"]
        if not model_turns:
            return
        turn = model_turns[-1]

        for step in turn.get("plan") or []:
            key = (turn["id"], step["ordinal"])
            if self._step_status.get(key) != step["status"] and step["status"] != "pending":
                self._step_status[key] = step["status"]
                print(f"  step {step['ordinal']} [{step['status']}] {step['description']}")

        text = turn.get("text") or ""
        shown = self._printed_text.get(turn["id"], 0)
        if len(text) > shown:
            print(text[shown:], end="", flush=True)
            self._printed_text[turn["id"]] = len(text)


class CognitiveCLI:
    COMMANDS: Dict[str, str] = {
        "/execute": "Run the plan awaiting review",
        "/cancel": "Cancel the task in progress",
        "/new": "Start a new chat",
        "/plan": "Show the current plan",
        "/delete <n>": "Delete step n",
        "/add": "Append a default step",
        "/move <a> <b>": "Swap steps a and b",
        "/revise <expand|optimize|revise>": "Regenerate the plan",
        "/archive": "Archive the latest finished turn",
        "/archived": "List archived turns",
        "/help": "Show this help",
        "/quit": "Exit",
    }

    def __init__(self, session: CognitiveOrchestrator) -> None:
        self.session = session
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self._handlers: Dict[str, Callable[[List[str]], Awaitable[bool]]] = {
            "/execute": self._handle_execute,
            "/cancel": self._handle_cancel,
            "/new": self._handle_new,
            "/plan": self._handle_plan,
            "/delete": self._handle_delete,
            "/add": self._handle_add,
            "/move": self._handle_move,
            "/revise": self._handle_revise,
            "/archive": self._handle_archive,
            "/archived": self._handle_archived,
            "/help": self._handle_help,
            "/quit": self._handle_quit,
            "/exit": self._handle_quit,
        }
        self._subscription = session.subscribe(SnapshotPrinter())

    # ========== Main Loop ==========

    async def get_input(self) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: input("\nYou> ").strip())

    async def run(self) -> None:
        self._running = True
        print("Cognitive agent ready. Type /help for commands.")
        while self._running:
            try:
                user_input = await self.get_input()
                if not user_input:
                    continue
                if user_input.startswith("/"):
                    parts = user_input.split()
                    handler = self._handlers.get(parts[0].lower())
                    if handler is None:
                        print(f"Unknown command: {parts[0]}")
                        continue
                    if not await handler(parts[1:]):
                        break
                else:
                    self._start(self.session.submit_query(user_input))
            except (KeyboardInterrupt, EOFError):
                print("\nBye!")
                break
            except Exception as e:
                LOGGER.error(f"Unexpected error in main loop: {e}", exc_info=True)
                print(f"Error: {e}")
        await self.on_shutdown()

    async def on_shutdown(self) -> None:
        self.session.close()
        if self._task is not None and not self._task.done():
            await asyncio.gather(self._task, return_exceptions=True)
        self._subscription.unsubscribe()
        LOGGER.info("CLI shutting down")

    def _start(self, coro: Awaitable[Any]) -> None:
        """Run a session coroutine in the background so /cancel stays available."""
        if self._task is not None and not self._task.done():
            print("A task is still running; use /cancel first.")
            coro.close()
            return
        self._task = asyncio.ensure_future(coro)

    def _latest_turn_id(self) -> Optional[str]:
        turn = self.session.ledger.latest_model_turn()
        return turn.id if turn else None

    # ========== Command Handlers ==========

    async def _handle_execute(self, args: List[str]) -> bool:
        turn_id = self._latest_turn_id()
        if turn_id is None or self.session.state != ProcessState.AWAITING_EXECUTION:
            print("No plan is awaiting execution.")
            return True
        self._start(self.session.execute_plan(turn_id))
        return True

    async def _handle_cancel(self, args: List[str]) -> bool:
        if not self.session.cancel_query():
            print("Nothing to cancel.")
        return True

    async def _handle_new(self, args: List[str]) -> bool:
        self.session.start_new_chat()
        print("Started a new chat.")
        return True

    async def _handle_plan(self, args: List[str]) -> bool:
        turn = self.session.ledger.latest_model_turn()
        if turn is None or not turn.plan:
            print("No plan.")
            return True
        for step in turn.plan:
            print(f"  {step.ordinal}. [{step.tool.value}] {step.description} ({step.status.value})")
        return True

    async def _edit(self, op: Callable[[str], bool]) -> None:
        turn_id = self._latest_turn_id()
        if turn_id is None or not op(turn_id):
            print("The plan could not be changed.")
            return
        await self._handle_plan([])

    async def _handle_delete(self, args: List[str]) -> bool:
        if len(args) != 1 or not args[0].isdigit():
            print("Usage: /delete <n>")
            return True
        await self._edit(lambda turn_id: self.session.delete_plan_step(turn_id, int(args[0]) - 1))
        return True

    async def _handle_add(self, args: List[str]) -> bool:
        await self._edit(self.session.add_plan_step)
        return True

    async def _handle_move(self, args: List[str]) -> bool:
        if len(args) != 2 or not all(a.isdigit() for a in args):
            print("Usage: /move <a> <b>")
            return True
        a, b = int(args[0]) - 1, int(args[1]) - 1
        await self._edit(lambda turn_id: self.session.reorder_plan(turn_id, a, b))
        return True

    async def _handle_revise(self, args: List[str]) -> bool:
        mode = args[0] if args else "revise"
        turn_id = self._latest_turn_id()
        if turn_id is None or mode not in ("expand", "optimize", "revise"):
            print("Usage: /revise <expand|optimize|revise>")
            return True
        self._start(self.session.regenerate_plan(turn_id, mode))
        return True

    async def _handle_archive(self, args: List[str]) -> bool:
        turn_id = self._latest_turn_id()
        if turn_id is None or not self.session.archive_turn(turn_id):
            print("Nothing to archive.")
        else:
            print("Archived.")
        return True

    async def _handle_archived(self, args: List[str]) -> bool:
        for turn in self.session.list_archived():
            print(f"  {turn.archived_at:%Y-%m-%d %H:%M} {turn.user_query!r} [{turn.state.value if turn.state else '-'}]")
        return True

    async def _handle_help(self, args: List[str]) -> bool:
        for command, description in self.COMMANDS.items():
            print(f"  {command:<36} {description}")
        return True

    async def _handle_quit(self, args: List[str]) -> bool:
        self._running = False
        return False


async def async_main() -> None:
    from cognitiveAgent.runtime import build_application
    from cognitiveAgent.utils import get_logger

    get_logger()
    new_session = build_application()
    await CognitiveCLI(new_session()).run()


def main() -> None:
    asyncio.run(async_main())
