"""Template-driven tester for affiliate postback URLs."""
