"""
Toolkit behind the arranke project showcase.

Storage, authentication and object storage are pluggable ('database',
'auth', 'storage'); 'reactions' holds the like/dislike ledger and 'listings'
the listing, moderation and avatar workflows built on top of them.
"""
