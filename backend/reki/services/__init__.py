"""Domain services: venue directory, live state, vibe schedules, busyness simulation, automation, offers."""
