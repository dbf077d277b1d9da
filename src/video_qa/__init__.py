"""YouTube video question answering.

This package fetches a video's transcript, chunks and embeds it, and answers
questions about the video by retrieving the most similar chunks and grounding
a language model in them.
"""
