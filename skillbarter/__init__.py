"""Skill Barter: exchange skills with other people."""
