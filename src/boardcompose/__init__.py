"""boardcompose — compose media on a fixed-size board.

Arrange images, video stills and social-post cards inside a fixed
frame, keep them contained, persist the layout between sessions, and
export the frame as a PNG.
"""
