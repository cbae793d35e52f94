"""Leave governance engine — approval routing and leave balance ledger."""
