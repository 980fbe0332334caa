"""Pure computation: record shapes, tagged values, statement generation. No I/O."""
