"""taskgrid: tenancy hierarchy and access resolution service."""
