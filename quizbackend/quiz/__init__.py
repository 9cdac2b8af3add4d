"""
Quiz question selection.

Questions are image files stored in runs of five: the question image, the
correct answer image, then three wrong answer images.
"""
