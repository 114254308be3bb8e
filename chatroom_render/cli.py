#!/usr/bin/env python3
"""CLI interface for chatroom-render."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from .converter import convert_transcript_to_html
from .errors import FatalLoadError
from .fetch import DefaultFetcher, is_remote, local_path
from .models import DEFAULT_TITLE, ChatroomConfig, get_default_templates_url
from .renderer import RenderServices


def get_default_output_path(source: str) -> Path:
    """Place the page next to a local transcript, or in the working directory."""
    if is_remote(source):
        return Path("chatroom.html")
    return local_path(source).with_suffix(".html")


async def _convert(config: ChatroomConfig, output_path: Path) -> Path:
    fetcher = DefaultFetcher()
    try:
        return await convert_transcript_to_html(
            config, output_path, RenderServices(fetcher=fetcher)
        )
    finally:
        await fetcher.aclose()


@click.command()
@click.argument("source")
@click.option(
    "--my-avatar",
    required=True,
    help="Avatar URL shown for messages sent by 'me'.",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Output HTML file (default: next to a local transcript, else ./chatroom.html).",
)
@click.option("--title", default=DEFAULT_TITLE, show_default=True, help="Chat window title.")
@click.option("--hide-avatars", is_flag=True, help="Render messages without avatars.")
@click.option(
    "--templates-url",
    default=None,
    help="Card template root, URL or local directory (default: $CHATROOM_RENDER_TEMPLATES_URL or the public template CDN).",
)
@click.option(
    "--mount-id",
    default="chatroom",
    show_default=True,
    help="Id of the element the chat container is mounted in.",
)
@click.option(
    "--open-browser",
    is_flag=True,
    help="Open the generated page in the default browser.",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug logging and show full traceback on errors.",
)
def main(
    source: str,
    my_avatar: str,
    output: Optional[Path],
    title: str,
    hide_avatars: bool,
    templates_url: Optional[str],
    mount_id: str,
    open_browser: bool,
    debug: bool,
) -> None:
    """Render a chat transcript JSON file to a standalone HTML page.

    SOURCE: Path or http(s) URL of the transcript JSON array.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        config = ChatroomConfig(
            chatroom_name=mount_id,
            json_file_path=source,
            my_avatar=my_avatar,
            title=title,
            hide_avatar=hide_avatars,
            templates_url=templates_url or get_default_templates_url(),
        )
        output_path = output or get_default_output_path(source)
        asyncio.run(_convert(config, output_path))
        click.echo(f"Successfully rendered {source} to {output_path}")

        if open_browser:
            click.launch(str(output_path))

    except (FatalLoadError, ValidationError) as e:
        click.echo(f"Error: {e}", err=True)
        if debug:
            import traceback

            traceback.print_exc()
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error rendering transcript: {e}", err=True)
        if debug:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
