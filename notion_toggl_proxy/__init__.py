"""Credential-hiding relay for the Notion and Toggl Track APIs."""
