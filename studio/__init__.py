"""AI Builder Studio — version and state reconciliation core for an AI app builder."""
