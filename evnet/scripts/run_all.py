"""
Run the entire generation pipeline.

Steps:
01. Generate network
02. Precompute routes
03. Build trips
"""

import sys

from evnet.errors import ConfigurationError
from evnet.scripts.build_trips import build_trips
from evnet.scripts.generate_network import generate_network
from evnet.scripts.precompute_routes import precompute_routes


def run_all() -> None:
    steps = [
        ("01. Generate network", generate_network),
        ("02. Precompute routes", precompute_routes),
        ("03. Build trips", build_trips),
    ]

    print("----------------------------------------------------------------------")
    print("Running the entire generation pipeline...\n\n")

    for title, func in steps:
        print("----------------------------------------------------------------------")
        print(f"Running {title}...")

        func()

        print(f"{title} completed successfully!")

    print("\n\n----------------------------------------------------------------------")
    print("Pipeline completed successfully!")
    print("----------------------------------------------------------------------")


def main() -> None:
    try:
        run_all()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
