# Entry point for printing a bracket layout from a tournament file

import yaml
from bracket.connectors import connector_paths_for_layout
from bracket.formats import TournamentFormat
from bracket.layout import compute_layout, merge_layout_settings
from bracket.models import Team
import os

def load_tournament(file_path):
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or {}
    teams = [Team.from_dict(t) for t in data.get('teams') or []]
    return teams, data.get('stages') or []

def load_settings(file_path):
    if not os.path.exists(file_path):
        return merge_layout_settings()
    with open(file_path, mode='r', encoding='utf-8') as file:
        return merge_layout_settings(yaml.safe_load(file) or {})

def main():
    import sys

    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    tournament_file = sys.argv[1] if len(sys.argv) > 1 else os.path.join(base_dir, 'data', 'tournament.yaml')
    settings_file = os.path.join(base_dir, 'data', 'settings.yaml')

    teams, stages = load_tournament(tournament_file)
    settings = load_settings(settings_file)

    if not stages:
        print(f"No stages loaded. Check {tournament_file}")
        return

    names = {team.id: team.name for team in teams}
    knockouts = [d for d in TournamentFormat(teams, stages).generate() if d.get('matches')]
    if not knockouts:
        print("No knockout stage to lay out.")
        return

    for draft in knockouts:
        layout = compute_layout(draft['matches'], settings=settings)
        print(f"\n--- {draft['name'] or 'Knockout'} ---")
        for index, ((round_num, column), label) in enumerate(zip(layout.rounds, layout.round_labels())):
            print(f"\n{label} (x={layout.column_x(index):g})")
            for match in column:
                if match.is_stub:
                    continue
                team_a = names.get(match.team_a_id, 'TBD')
                team_b = names.get(match.team_b_id, 'BYE' if match.is_bye else 'TBD')
                print(f"  [{match.id}] y={layout.targets[match.id]:g} offset={layout.offsets[match.id]:g}: "
                      f"{team_a} vs {team_b}")

        print("\nConnectors:")
        for path in connector_paths_for_layout(layout, settings.get('curve_tension')):
            print(f"  {path.from_id} -> {path.to_id}: {path.to_svg()}")

if __name__ == '__main__':
    main()
