"""Atomic operations for the timeblocking calendar generator.

Each module is an independently callable operation:
    config          Defaults, config file/env overrides, logging helpers
    intervals       Minute-of-day intervals: parse, merge, subtract
    gap_analysis    Busy windows around gigs + the morning free window
    block_packer    Greedy first-fit placement of prioritised work blocks
    day_selector    Weekday projection and per-day planning
    gig_fetch       Gigs API fetch + grouping by day
    id_gen          Stable UIDs for placed blocks
    ics_writer      iCalendar rendering and atomic file write
"""
