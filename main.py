"""
Entry point — see ``codegraph.cli``.

Usage:
    python main.py <project_id> "<question>" [--format json|csv|tsv]
"""

from codegraph.cli import run

if __name__ == "__main__":
    run()
