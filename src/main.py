# Command line report of stored stages: group standings and bracket

import argparse
import os

from arena.elimination import get_bracket_display
from arena.standings import calculate_group_standings
from arena.storage import YamlStore, load_stages


def format_standings(group):
    lines = [f"# {group.name}"]
    for position, row in enumerate(calculate_group_standings(group), start=1):
        lines.append(
            f"  {position}. {row['pair'].display_name}: {row['wins']} W, "
            f"{row['losses']} L, balance {row['balance']:+d}"
        )
    return lines


def format_bracket(bracket):
    display = get_bracket_display(bracket)
    lines = []
    for round_data in display['rounds']:
        lines.append(f"## {round_data['name']}")
        for match in round_data['matches']:
            pair1 = _pair_name(match.get('pair1'))
            pair2 = _pair_name(match.get('pair2'))
            score = ''
            if 'score1' in match and 'score2' in match:
                score = f"  {match['score1']}-{match['score2']}"
            lines.append(f"  {pair1} vs {pair2}{score}")
    if display['champion']:
        lines.append(f"Champion: {_pair_name(display['champion'])}")
    return lines


def _pair_name(pair):
    if not pair:
        return 'TBD'
    return f"{pair['player1']['name']} / {pair['player2']['name']}"


def main():
    base_dir = os.path.dirname(os.path.dirname(__file__))
    parser = argparse.ArgumentParser(description='Print standings and brackets of stored stages.')
    parser.add_argument('--data-dir', default=os.environ.get('ARENA_DATA_DIR', os.path.join(base_dir, 'data')))
    parser.add_argument('--stage', help='Only print the stage with this name')
    args = parser.parse_args()

    stages = load_stages(YamlStore(args.data_dir))
    if args.stage:
        stages = [s for s in stages if s.name == args.stage]

    if not stages:
        print(f"No stages found in {args.data_dir}")
        return

    for stage in stages:
        print(f"=== {stage.name} ===")
        for group in stage.groups:
            print('\n'.join(format_standings(group)))
        if stage.tournament_matches:
            print('\n'.join(format_bracket(stage.tournament_matches)))
        else:
            print("No bracket generated.")
        print()


if __name__ == '__main__':
    main()
