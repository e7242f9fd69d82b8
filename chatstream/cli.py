"""
chatstream CLI - replay and inspect recorded assistant messages.

Usage:
    chatstream replay FILE        Replay a recorded message as a live stream
    chatstream segments FILE      Print the parsed segments
    chatstream preview FILE       Print the balanced markdown preview

FILE may be '-' to read from stdin.

Examples:
    chatstream replay transcript.md --delay-ms 20
    chatstream segments transcript.md --json
    cat partial.md | chatstream preview -
"""

import argparse
import asyncio
import json
import sys
from typing import AsyncIterator, List, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.markdown import Markdown

from chatstream.config.app_config import ChunkerConfig
from chatstream.parsing.message_segments import build_message_segments
from chatstream.streaming.markdown_formatter import MarkdownStreamFormatter
from chatstream.streaming.message_stream import MessageStream
from chatstream.utils.custom_exceptions import ChatStreamError
from chatstream.utils.logging_utils import logger
from chatstream.utils.terminal_markdown import SegmentRenderer


def read_input(path: str) -> str:
    """Read the recorded message from a file, or stdin for '-'."""
    if path == '-':
        return sys.stdin.read()
    with open(path, encoding='utf-8') as f:
        return f.read()


def split_bursts(text: str, burst_size: int) -> List[str]:
    """Cut text into fixed-size deltas, standing in for network reads."""
    burst_size = max(1, burst_size)
    return [text[i:i + burst_size] for i in range(0, len(text), burst_size)]


async def _iterate(deltas: List[str], pause: float) -> AsyncIterator[str]:
    for delta in deltas:
        yield delta
        if pause > 0:
            await asyncio.sleep(pause)


async def replay(text: str, args, console: Console) -> MessageStream:
    base = ChunkerConfig.from_env()
    config = base.model_copy(update={
        'enable_chunking': base.enable_chunking and not args.no_chunking,
        **({'inter_chunk_delay': args.delay_ms / 1000.0, 'word_delay': args.delay_ms / 1000.0}
           if args.delay_ms is not None else {}),
    })
    renderer = SegmentRenderer(console=console, show_reasoning=not args.hide_reasoning)
    stream = MessageStream()
    deltas = split_bursts(text, args.burst)
    logger.info(f"Replaying {len(text)} chars as {len(deltas)} deltas")

    with Live(console=console, refresh_per_second=20, transient=False) as live:
        async for update in stream.consume(_iterate(deltas, args.burst_pause_ms / 1000.0), config, by_words=args.by_words):
            if update.is_structured:
                live.update(Group(*renderer.renderables(update.segments)))
            else:
                live.update(Markdown(update.preview))
        live.update(Group(*renderer.renderables(stream.segments())))
    return stream


def cmd_replay(args):
    console = Console()
    text = read_input(args.file)
    asyncio.run(replay(text, args, console))


def cmd_segments(args):
    text = read_input(args.file)
    segments = build_message_segments(text)
    if args.json:
        payload = [s.model_dump(exclude={'source'}, exclude_none=True) for s in segments]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return
    SegmentRenderer(console=Console()).render(segments)


def cmd_preview(args):
    formatter = MarkdownStreamFormatter()
    sys.stdout.write(formatter.replace(read_input(args.file)))
    sys.stdout.write('\n')


def create_parser():
    parser = argparse.ArgumentParser(
        prog='chatstream',
        description='Replay and inspect streamed assistant messages',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  chatstream replay transcript.md               Replay with default pacing
  chatstream replay transcript.md --by-words    Word-by-word pacing
  chatstream segments transcript.md --json      Dump segments as JSON
  cat partial.md | chatstream preview -         Balance a truncated message
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    replay_parser = subparsers.add_parser('replay', help='Replay a recorded message as a stream')
    replay_parser.add_argument('file', help="Recorded message ('-' for stdin)")
    replay_parser.add_argument('--no-chunking', action='store_true', help='Pass deltas through unchanged')
    replay_parser.add_argument('--by-words', action='store_true', help='Chunk by whole words')
    replay_parser.add_argument('--delay-ms', type=int, help='Delay between chunks in milliseconds')
    replay_parser.add_argument('--burst', type=int, default=64, help='Characters per simulated network delta')
    replay_parser.add_argument('--burst-pause-ms', type=int, default=30, help='Pause between simulated deltas')
    replay_parser.add_argument('--hide-reasoning', action='store_true', help='Do not show reasoning panels')
    replay_parser.set_defaults(func=cmd_replay)

    segments_parser = subparsers.add_parser('segments', help='Print parsed segments')
    segments_parser.add_argument('file', help="Recorded message ('-' for stdin)")
    segments_parser.add_argument('--json', action='store_true', help='Print segments as JSON')
    segments_parser.set_defaults(func=cmd_segments)

    preview_parser = subparsers.add_parser('preview', help='Print the balanced markdown preview')
    preview_parser.add_argument('file', help="Recorded message ('-' for stdin)")
    preview_parser.set_defaults(func=cmd_preview)

    return parser


def main(argv: Optional[List[str]] = None):
    """CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        args.func(args)
    except KeyboardInterrupt:
        print()
        sys.exit(0)
    except (ChatStreamError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
