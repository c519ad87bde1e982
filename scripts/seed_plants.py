"""Seed sample plants into the database."""
from greenhouse.plant import ConflictError, Plant, PlantRepository

INITIAL_PLANTS = [
    {
        "name": "Monstera Deliciosa",
        "other_names": ["Swiss Cheese Plant"],
        "light": "Bright Indirect",
        "humidity": "High",
        "water": "Moderate",
    },
    {
        "name": "Ficus Elastica",
        "other_names": ["Rubber Plant", "Rubber Tree", "Rubber Fig"],
        "light": "Bright Indirect",
        "humidity": "Moderate",
        "water": "Moderate",
    },
    {
        "name": "Aloe Vera",
        "light": "Bright Indirect",
        "humidity": "Low",
        "water": "Low",
    },
]


def main():
    plants_repo = PlantRepository()
    plants_repo.ensure_collection()

    for plant in INITIAL_PLANTS:
        try:
            plant_id = plants_repo.create(Plant(**plant))
        except ConflictError:
            print(f"Skipping {plant['name']} - already exists")
            continue
        print(f"Created: {plant['name']} (id={plant_id})")


if __name__ == "__main__":
    main()
