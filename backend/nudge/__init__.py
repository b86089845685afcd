"""Nudge — tiered notification agent: DM reminders, replies, expiry sweeps."""
