"""Pure domain layer: value types, milestone-set rules, accumulation, completion."""
