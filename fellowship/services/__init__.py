"""Services package

Store and blob store, plus one service per area of the API. Services are
built per request from the store on ``app.state``.
"""
