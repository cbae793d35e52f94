"""Leave requests — model and read-only store adapter."""
