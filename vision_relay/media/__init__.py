"""
Media handling for the relay:

- Page rasterization (PDF first page → PNG)
- Vision extraction (image URL / data URI → text)
- The update pipeline that ties them to the Telegram client
"""
