#!/usr/bin/env python3

from __future__ import annotations
import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer
from aioconsole import ainput
from rich.console import Console
from rich.table import Table

from lcrealtime.client.loopback import LoopbackHub, LoopbackTransport
from lcrealtime.client.realtime import Realtime
from lcrealtime.core.MessageParser import MessageParser
from lcrealtime.core.Messages import Message, TextMessage, TypedMessage
from lcrealtime.shared.config import load_config
from lcrealtime.shared.log import configure_root_logging, get_logger, set_level

app = typer.Typer(help="lcrealtime developer tools")
console = Console()
logger = get_logger(__name__)


def _message_table(message: Message) -> Table:
    table = Table(title=type(message).__name__)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("content", json.dumps(message.content, ensure_ascii=False))
    table.add_row("from", str(message.from_))
    table.add_row("timestamp", str(message.timestamp))
    table.add_row("need_receipt", str(message.need_receipt))
    table.add_row("transient", str(message.transient))
    return table


def _render(message: Message) -> str:
    if isinstance(message, TypedMessage):
        return message.text
    return json.dumps(message.content, ensure_ascii=False)


@app.command()
def decode(
    payload: Optional[str] = typer.Argument(None, help="Wire payload (JSON text)"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read the payload from a file"),
):
    """Show which message variant decodes a wire payload."""
    if file is not None:
        payload = file.read_text(encoding="utf-8")
    if payload is None:
        console.print("[red]Give a payload or --file[/]")
        raise typer.Exit(code=2)

    message = MessageParser.with_builtins().decode(payload)
    if message is None:
        console.print("[yellow]No variant matched[/]")
        raise typer.Exit(code=1)
    console.print(_message_table(message))


@app.command()
def encode(
    text: str = typer.Argument(..., help="Message text"),
    kind: str = typer.Option("text", help="text, typed or plain"),
    attr: List[str] = typer.Option([], "--attr", help="key=value attribute (typed/text only)"),
):
    """Print the wire form of a message."""
    attrs = {}
    for item in attr:
        key, sep, value = item.partition("=")
        if not sep:
            console.print(f"[red]Bad --attr {item!r}, expected key=value[/]")
            raise typer.Exit(code=2)
        attrs[key] = value

    if kind == "text":
        message: Message = TextMessage({"text": text, "attr": attrs})
    elif kind == "typed":
        message = TypedMessage({"text": text, "attr": attrs})
    elif kind == "plain":
        message = Message(text)
    else:
        console.print(f"[red]Unknown kind {kind!r}[/]")
        raise typer.Exit(code=2)
    typer.echo(MessageParser.with_builtins().encode(message))


@app.command()
def demo(
    config: Optional[Path] = typer.Option(None, help="YAML config file"),
    room_name: str = typer.Option("lobby", "--room", help="Room name"),
):
    """Pair two clients over an in-memory transport and relay stdin lines between them."""
    cfg = load_config(config)
    configure_root_logging(cfg.log_level)
    set_level(cfg.log_level)
    sender_id = cfg.client_id or "alice"
    peer_id = "bob" if sender_id != "bob" else "carol"

    async def main_loop() -> None:
        hub = LoopbackHub()
        room = hub.create_room(room_name, members=[peer_id])
        sender = Realtime(LoopbackTransport(hub), config=cfg)
        peer = Realtime(LoopbackTransport(hub), config=cfg)
        await sender.connect(cfg.connect_options(clientId=sender_id))
        await peer.connect(cfg.connect_options(clientId=peer_id))

        sender_room = await sender.room(room.id)
        peer_room = await peer.room(room.id)
        await sender_room.join()
        logger.info("Demo room %s ready (%s -> %s)", room.id, sender_id, peer_id)

        peer_room.on("message", lambda m: console.print(f"[bold cyan]{peer_id}[/] got {type(m).__name__}: {_render(m)}"))
        console.print(f"[bold green]Room {room_name}[/] members: {', '.join(room.members)}; /help for commands")

        try:
            while True:
                line = (await ainput(f"{sender_id}> ")).strip()
                if not line:
                    continue
                if line in {"/quit", "/exit"}:
                    break
                if line == "/help":
                    console.print("/history, /members, /quit; anything else is sent as a text message")
                    continue
                if line == "/history":
                    for message in await peer_room.log():
                        console.print(f"[dim]{type(message).__name__}[/] {_render(message)}")
                    continue
                if line == "/members":
                    table = Table(title="Members")
                    table.add_column("Client ID")
                    for member in room.members:
                        table.add_row(member)
                    console.print(table)
                    continue
                await sender_room.send(TextMessage(line))
                await asyncio.sleep(0)
        except EOFError:
            pass
        finally:
            await sender.close()
            await peer.close()

    asyncio.run(main_loop())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
