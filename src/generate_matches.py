import yaml
import os
from bracket.elimination import get_knockout_summary
from bracket.formats import TournamentFormat
from bracket.models import Team

def load_tournament(file_path):
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or {}
    teams = [Team.from_dict(t) for t in data.get('teams') or []]
    stages = data.get('stages') or []
    return teams, stages

def format_rows(rows, names):
    """Round-robin rows as printable lines, one header per group and matchday."""
    lines = []
    current = None
    for row in sorted(rows, key=lambda r: (r.group_index if r.group_index is not None else -1, r.matchday)):
        key = (row.group_index, row.matchday)
        if key != current:
            group = f"Group {row.group_index + 1}, " if row.group_index is not None else ""
            lines.append(f"## {group}Matchday {row.matchday}")
            current = key
        lines.append(f"{names.get(row.team_a_id, 'TBD')} vs {names.get(row.team_b_id, 'TBD')}")
    return lines

def format_matches(matches, names):
    lines = []
    for match in matches:
        if match.is_bye:
            team = match.team_a_id if match.team_a_id is not None else match.team_b_id
            lines.append(f"[{match.id}] R{match.round} #{match.bracket_pos}: {names.get(team, team)} (bye)")
            continue
        team_a = names.get(match.team_a_id, 'TBD') if match.team_a_id is not None else 'TBD'
        team_b = names.get(match.team_b_id, 'TBD') if match.team_b_id is not None else 'TBD'
        lines.append(f"[{match.id}] R{match.round} #{match.bracket_pos}: {team_a} vs {team_b}")
    return lines

def main():
    import sys

    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    # Use command line argument if provided, otherwise use default path
    tournament_file = sys.argv[1] if len(sys.argv) > 1 else os.path.join(base_dir, 'data', 'tournament.yaml')

    teams, stages = load_tournament(tournament_file)

    if not stages:
        print(f"No stages defined. Check {tournament_file}")
        return

    names = {team.id: team.name for team in teams}
    drafts = TournamentFormat(teams, stages).generate()

    first_stage = True
    for draft in drafts:
        if not first_stage:
            print()  # Add newline before each stage except the first one
        print(f"# {draft['name'] or 'Stage ' + str(draft['stage_index'] + 1)} ({draft['kind']})")
        for line in format_rows(draft.get('rows', []), names):
            print(line)
        if 'matches' in draft:
            for line in format_matches(draft['matches'], names):
                print(line)
            summary = get_knockout_summary(draft['matches'])
            per_round = ', '.join(f"{name}: {count}" for name, count in summary['matches_per_round'].items())
            print(f"Bracket of {summary['bracket_size']}, {summary['byes']} bye(s). {per_round}")
        first_stage = False

if __name__ == '__main__':
    main()
