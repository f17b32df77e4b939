"""
Offline console demo: chat with the assistant without any API keys.

Messages go through the real dialogue router with the keyword classifier.
Committed leads, tickets and bookings are written to a throwaway data
directory unless ``--data-dir`` is given.

Usage:
    python console_demo.py
    python console_demo.py --scenario lead
    python console_demo.py --scenario support
    python console_demo.py --scenario schedule
"""

import argparse
import asyncio
import tempfile
import uuid
from pathlib import Path
from typing import Optional

from ts_assistant.config import StorageConfig, settings
from ts_assistant.conversation.router import DialogueRouter, InvalidRequestError
from ts_assistant.nlu.classifier import KeywordClassifier
from ts_assistant.tools.storage import build_stores

BLUE = "\033[94m"
GREEN = "\033[92m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


class ConsoleSession:
    """One chat session driven from the terminal."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "lead": [
            "Quero um orçamento para app mobile",
            "João Silva",
            "joao@empresa.com",
            "Empresa XPTO",
            "Equipe de 12 pessoas",
            "Orçamento estimado 50000",
            "Sim, pode enviar",
        ],
        "support": [
            "Estou com erro 500 no login",
            "alta",
            "suporte@cliente.com",
            "sim",
        ],
        "schedule": [
            "Quero agendar uma demo do chatbot",
            "1",
            "ana@cliente.com",
            "sim",
        ],
    }

    MAX_INPUT_LENGTH = 500

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir
        self.stores = build_stores(StorageConfig(data_dir=str(data_dir)))
        self.router = DialogueRouter.from_config(
            settings, stores=self.stores, classifier=KeywordClassifier()
        )
        self.session_id = f"console-{uuid.uuid4().hex[:8]}"

    def agent_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[{settings.business.assistant_name}]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {title}{RESET}")
        print(f"{BOLD}  Business: {settings.business.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    async def _send(self, text: str) -> None:
        try:
            response = await self.router.submit(self.session_id, text)
        except InvalidRequestError as exc:
            self.system_log(f"Rejected: {exc}")
            return
        self.agent_say(response.reply)
        self.system_log(f"Intent: {response.intent.value}")
        if response.submission_failed:
            self.system_log("Submission failed, record kept for retry")

    async def _report(self) -> None:
        counts = {
            domain.value: len(await store.load_all()) for domain, store in self.stores.items()
        }
        session = self.router.sessions.get_or_create(self.session_id)
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{DIM}  Stored records: {counts}{RESET}")
        print(f"{DIM}  In-flight flows: {[d.value for d in session.unfinished_domains()]}{RESET}")
        print(f"{DIM}  Data directory: {self.data_dir}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"TS ASSISTENTE - Scenario: {scenario}")
        for step in steps:
            print(f"\n{BLUE}[Cliente] {RESET}{step}")
            await self._send(step)
        await self._report()

    async def run(self) -> None:
        self._banner("TS ASSISTENTE - Console Demo (type 'sair' to exit)")
        self.agent_say(f"Olá! Sou o {settings.business.assistant_name}. Como posso ajudar?")

        while True:
            user_input = input(f"\n{BLUE}[Cliente] {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("sair", "quit", "exit", "q"):
                print(f"\n{DIM}Sessão encerrada.{RESET}")
                break
            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.agent_say("Mensagem muito longa. Pode resumir, por favor?")
                continue
            await self._send(user_input)

        await self._report()


async def _main(scenario: Optional[str], data_dir: Optional[str]) -> None:
    if data_dir:
        session = ConsoleSession(Path(data_dir))
        await (session.run_scenario(scenario) if scenario else session.run())
        return
    with tempfile.TemporaryDirectory(prefix="ts-assistant-") as tmp:
        session = ConsoleSession(Path(tmp))
        await (session.run_scenario(scenario) if scenario else session.run())


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Keep committed records in this directory instead of a temporary one",
    )
    args = parser.parse_args()
    asyncio.run(_main(args.scenario, args.data_dir))


if __name__ == "__main__":
    main()
