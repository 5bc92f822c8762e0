"""
Nudge scheduling subsystem.

Components:
- controller.py: preferences -> schedule, and the generate-and-notify cycle
- sweeper.py: cancels one-shot notifications whose fire time already passed
- platform.py: APScheduler-backed scheduler backend + desktop delivery
- keepalive.py: optional "keep the process running" switch
"""
