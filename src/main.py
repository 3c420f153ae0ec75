# Entry point for simulating a dice knockout tournament from the command line

import argparse
import logging
import random
import sys

import yaml

from knockout.config import load_settings
from knockout.display import get_bracket_display
from knockout.errors import KnockoutError
from knockout.session import TournamentSession


def load_participants(file_path):
    """Read participants from YAML: a list of names, or a mapping of id -> name."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    if isinstance(data, dict):
        return [(pid, str(name)) for pid, name in data.items()]
    return [(index + 1, str(name)) for index, name in enumerate(data)]


def generate_participants(count):
    return [(index + 1, f"Player {index + 1}") for index in range(count)]


def play(session):
    """Draw for both sides of every contest until the tournament ends."""
    while session.state == 'playing':
        contest = session.current_contest
        for participant in (contest.slot_a, contest.slot_b):
            if session.current_contest is contest and participant.last_roll is None:
                session.record_roll(participant.id)


def print_bracket(bracket_display):
    for round_data in bracket_display['rounds']:
        print(f"\n{round_data['name']}:")
        for contest in round_data['contests']:
            winner = contest['winner']['name'] if contest['winner'] else '-'
            if contest['kind'] == 'solo':
                print(f"  {contest['slot_a']['name']} (advances) -> {winner}")
            elif contest['kind'] == 'pending':
                print("  Waiting for entrants")
            else:
                print(f"  {contest['slot_a']['name']} vs {contest['slot_b']['name']} -> {winner}")
    for bye in bracket_display['byes']:
        print(f"\n{bye['participant']['name']} sat out and rejoined in round {bye['round_index'] + 1}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Simulate a single elimination dice tournament'
    )
    parser.add_argument(
        'participants',
        nargs='?',
        help='YAML file with a list of names or a mapping of id to name'
    )
    parser.add_argument(
        '--count',
        type=int,
        default=8,
        help='Number of generated players when no file is given (default: 8)'
    )
    parser.add_argument(
        '--settings',
        help='YAML settings file (default: $KNOCKOUT_SETTINGS)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        help='Seed for a reproducible run'
    )
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except KnockoutError as e:
        print(f"Invalid settings: {e.message}")
        return 2
    logging.basicConfig(level=settings['log_level'].upper(), format='%(levelname)s %(name)s: %(message)s')

    if args.participants:
        participants = load_participants(args.participants)
    else:
        participants = generate_participants(args.count)
    if not participants:
        print("No participants loaded.")
        return 1

    rng = random.Random(args.seed) if args.seed is not None else None
    session = TournamentSession('cli', 0, 'Organizer', settings=settings, rng=rng)
    try:
        for pid, name in participants:
            session.join(pid, name)
        session.start(0)
        play(session)
    except KnockoutError as e:
        print(f"Tournament stopped: {e.message}")
        return 1

    print("\n--- Final Bracket ---")
    print_bracket(get_bracket_display(session.bracket))
    print(f"\nChampion: {session.champion.name}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
