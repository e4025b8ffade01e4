#!/usr/bin/env python3
"""
Logistics Client Demo Runner

This script walks through the logistics flow offline by running each
component's demo in sequence. Nothing is sent to the provider.

Usage:
    python run_demo.py           # Run all demos
    python run_demo.py checkmac  # CheckMacValue signing only
    python run_demo.py catalog   # Build and sign an order
    python run_demo.py response  # Parse provider replies
    python run_demo.py notify    # Handle a status notification
"""

import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))


def print_header(title):
    """Print a nice header."""
    print("\n")
    print("=" * 70)
    print(f"  {title}")
    print("=" * 70)


def run_all_demos():
    """Run all component demos."""

    print_header("📦 LOGISTICS CLIENT DEMO")
    print("""
    This demo walks through creating a store pickup shipment and
    handling what the provider sends back.

    Press Enter to continue through each demo...
    """)

    demos = [
        ("1. CheckMacValue Signing", demo_checkmac),
        ("2. Building an Order", demo_catalog),
        ("3. Parsing Replies", demo_response),
        ("4. Status Notifications", demo_notify_handler),
    ]

    for title, demo_func in demos:
        print_header(title)
        try:
            demo_func()
        except Exception as e:
            print(f"\n⚠️  Error in demo: {e}")
        input("\n[Press Enter to continue...]\n")

    print_header("✅ DEMO COMPLETE")
    print("""
    Next steps:
    1. Read DESIGN.md for how the pieces fit together
    2. Run the tests: pytest tests/ -v
    3. Set ECPAY_LOGISTICS_* variables and send a stage order
    """)


def demo_checkmac():
    """Run CheckMacValue demo."""
    from shared.checkmac import demo_checkmac
    demo_checkmac()


def demo_catalog():
    """Run operation catalog demo."""
    from logistics.catalog import demo_catalog
    demo_catalog()


def demo_response():
    """Run reply parsing demo."""
    from logistics.response import demo_response
    demo_response()


def demo_notify_handler():
    """Run notification handler demo."""
    from merchant.notify_handler import demo_notify_handler
    demo_notify_handler()


def main():
    if len(sys.argv) > 1:
        command = sys.argv[1].lower()

        commands = {
            "all": run_all_demos,
            "checkmac": demo_checkmac,
            "catalog": demo_catalog,
            "response": demo_response,
            "notify": demo_notify_handler,
        }

        if command in commands:
            commands[command]()
        else:
            print(f"Unknown command: {command}")
            print("\nAvailable commands:")
            for cmd in commands:
                print(f"  {cmd}")
    else:
        run_all_demos()


if __name__ == "__main__":
    main()
