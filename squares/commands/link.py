from squares.appconfig import save_athlete_id
from squares.core import Squares


def run(athlete_id: str):
    """Store the athlete id handed back by the fitness provider's OAuth flow."""
    athlete_id = athlete_id.strip()
    if not athlete_id:
        print("Error: athlete id must not be empty.")
        return

    with Squares() as sq:
        previous = sq.athlete_id
        if previous and previous != athlete_id:
            print(f"Athlete {previous} is already linked. Run 'squares disconnect' first.")
            return
        save_athlete_id(athlete_id)
    print(f"✓ Linked athlete {athlete_id}.")
