"""Content filtering for outgoing and edited posts.

- Pipeline: the ordered decision stages applied to every post
- Gate: the shared new-account age check
- Text: accent stripping and link/image detection
"""
