"""Payment intent creation and access code retrieval."""
