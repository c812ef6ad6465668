"""
Command Line Interface Package

Command Structure:
- fuelrec: Main entry point with utility commands (version, config)
- fuelrec db: Schema management
- fuelrec drivers: Driver listing, profile edits and deactivation
- fuelrec fuel-logs: Hand-entered fuel logs and in-place corrections
- fuelrec import: Card-portal CSV uploads, followed by matching for the
  drivers that gained rows
- fuelrec match: Matching runs, reconciliation reports and statistics
"""
