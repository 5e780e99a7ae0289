"""Crow's Treasure: turn a thought into a generated keepsake and keep a chest of them."""
