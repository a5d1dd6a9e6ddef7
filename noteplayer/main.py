"""Command line entry point for noteplayer.

Subcommands:
    info    print the 88-key table
    play    play a note on a MIDI output port
    render  render a note to a WAV file
"""

import logging
import random
import sys
from argparse import ArgumentParser, Namespace
from pathlib import Path

import mido

from noteplayer import constants
from noteplayer.common import NotePlayerError
from noteplayer.destination import BufferDestination, MidiDestination
from noteplayer.emitter import GraphToneEmitter
from noteplayer.keyboard import get_notes_info
from noteplayer.note import Note, NoteResolver


def add_note_args(parser: ArgumentParser) -> None:
    ident = parser.add_mutually_exclusive_group(required=True)
    ident.add_argument("--name", help="note name, e.g. C#4")
    ident.add_argument("--freq", type=float, help="frequency in Hz")
    ident.add_argument("--key", type=int, help="piano key number (1-88)")
    parser.add_argument("--duration", type=float, help="seconds (default random)")
    parser.add_argument("--volume", type=float, default=constants.DEFAULT_VOLUME)
    parser.add_argument("--seed", type=int, help="seed for the default duration")


def make_parser() -> ArgumentParser:
    """Create the command-line argument parser."""
    parser = ArgumentParser(prog="noteplayer")
    parser.add_argument("--log-level", default=constants.DEFAULT_LOG_LEVEL)
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("info", help="print the keyboard table")

    play = subparsers.add_parser("play", help="play a note on a MIDI port")
    add_note_args(play)
    play.add_argument("--port", help="MIDI output port name (default port if unset)")
    play.add_argument("--channel", type=int, default=constants.DEFAULT_MIDI_CHANNEL)
    play.add_argument(
        "--bend-range", type=float, default=constants.DEFAULT_BEND_RANGE
    )

    render = subparsers.add_parser("render", help="render a note to a WAV file")
    add_note_args(render)
    render.add_argument("--out", type=Path, required=True)
    render.add_argument(
        "--sample-rate", type=int, default=constants.DEFAULT_SAMPLE_RATE
    )
    return parser


def configure_logging(log_level: str) -> None:
    """Configure the logging system with the specified log level."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(filename)s:%(lineno)d -- %(message)s",
        level=log_level,
    )


def resolve_note(args: Namespace) -> Note:
    """Build the note selected by the command line arguments."""
    resolver = NoteResolver(rng=random.Random(args.seed))
    if args.name is not None:
        note = resolver.by_name(args.name)
    elif args.freq is not None:
        note = resolver.by_frequency(args.freq)
    else:
        note = resolver.by_key_number(args.key)
    note.set_duration(args.duration)
    note.set_volume(args.volume)
    return note


def run_info() -> None:
    for entry in get_notes_info():
        print(f"{entry.key_number:2d} {entry.name:<3} {entry.frequency:.4f}")


def run_play(args: Namespace) -> None:
    note = resolve_note(args)
    logging.info("opening port %s", args.port or "(default)")
    with mido.open_output(args.port) as port:
        note.set_destination(
            MidiDestination(port, channel=args.channel, bend_range=args.bend_range)
        )
        note.play(GraphToneEmitter()).wait()


def run_render(args: Namespace) -> None:
    note = resolve_note(args)
    destination = BufferDestination(sample_rate=args.sample_rate)
    note.set_destination(destination)
    note.play(GraphToneEmitter()).wait()
    destination.write_wav(args.out)


def main() -> None:
    """Parse arguments, configure logging and run the chosen subcommand."""
    parser = make_parser()
    args = parser.parse_args()
    configure_logging(args.log_level)
    try:
        if args.command == "info":
            run_info()
        elif args.command == "play":
            run_play(args)
        else:
            run_render(args)
    except NotePlayerError as e:
        logging.error("%s", e)
        sys.exit(1)
    logging.info("done")


if __name__ == "__main__":
    main()
