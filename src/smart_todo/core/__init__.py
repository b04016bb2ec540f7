"""
Core wiring.

- errors.py: exception taxonomy
- ports.py: Protocols for storage backends and weather fetchers
- state.py: AppState (single owner of all mutable state)
- api.py: UI-facing operations over AppState
"""
