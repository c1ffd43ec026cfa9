"""Reactive state primitives."""

from pocketplan.reactive.signals import Computed, ReadonlySignal, Signal

__all__ = ["Computed", "ReadonlySignal", "Signal"]
