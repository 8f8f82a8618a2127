#!/usr/bin/env python3
"""Example of basic model manager usage."""

import sys

from translation_model_registry import ModelManager, RegistryEvent


def print_event(event, data):
    """Print errors and corrupt packages reported by the manager.

    Args:
        event: The registry event
        data: Event data
    """
    if event in (RegistryEvent.ERROR, RegistryEvent.CORRUPT_PACKAGE):
        print(f"  ! {data.get('message')}")


def print_models(title, models):
    """Print a list of models.

    Args:
        title: Heading to print
        models: Models to list
    """
    print(f"{title}:")
    if not models:
        print("  (none)")
    for model in models:
        marker = " (update available)" if model.outdated else ""
        print(f"  {model}{marker}")
    print()


def main():
    """Run the example."""
    manager = ModelManager()
    manager.subscribe(print_event)

    print(f"Models directory: {manager.managed_root}\n")
    print_models("Installed models", manager.installed_models())

    # Install an archive given on the command line
    if len(sys.argv) > 1:
        result = manager.install_file(sys.argv[1])
        print(f"Install: {result.status.value} - {result.message}\n")

    # Compare with the remote catalog
    fetched = manager.fetch_remote_models()
    if not fetched.success:
        print(f"Could not fetch the catalog: {fetched.message}")
        return

    print_models("New models", fetched.new_models)
    print_models("Updated models", fetched.updated_models)


if __name__ == "__main__":
    main()
