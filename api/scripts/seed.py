import argparse
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from deeplove.database import SessionLocal, init_db
from deeplove.services.seeding import seed_fake_profiles


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed fake Deep Love profiles")
    parser.add_argument("--n-profiles", type=int, default=20)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--password", type=str, default="deeplove123")
    parser.add_argument("--reset", action="store_true")
    args = parser.parse_args()

    init_db()
    with SessionLocal() as db:
        summary = seed_fake_profiles(
            db,
            n_profiles=args.n_profiles,
            seed=args.seed,
            password=args.password,
            reset=args.reset,
        )

    print("Seed completed")
    for k, v in summary.items():
        print(f"- {k}: {v}")


if __name__ == "__main__":
    main()
