"""Test tooling for the Linode cluster-api provider."""
