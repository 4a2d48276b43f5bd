"""
Event names.

C2S: frames the bot sends. S2C: frames the server sends; these are re-emitted
under the same name. ClientEvent: lifecycle events raised by the client itself.
Server tags not listed here are forwarded under their own name.
"""


class C2SEvent:
    AUTHENTICATE = "authenticate"
    SEND_MESSAGE = "send_message"
    EDIT_MESSAGE = "edit_message"
    DELETE_MESSAGE = "delete_message"
    ADD_REACTION = "add_reaction"
    REMOVE_REACTION = "remove_reaction"
    TYPING = "typing"
    GET_ONLINE_LIST = "get_online_list"


class S2CEvent:
    AUTHENTICATED = "authenticated"
    ERROR = "error"
    NEW_MESSAGE = "new_message"
    MESSAGE_EDITED = "message_edited"
    MESSAGE_DELETED = "message_deleted"
    REACTION_ADDED = "reaction_added"
    REACTION_REMOVED = "reaction_removed"
    USER_ONLINE = "user_online"
    USER_OFFLINE = "user_offline"
    ONLINE_LIST = "online_list"


class ClientEvent:
    READY = "ready"
    AUTHENTICATED = "authenticated"
    DISCONNECT = "disconnect"
    ERROR = "error"
    RAW = "raw"


# Inbound tags whose payload carries a `message` record
MESSAGE_EVENTS = frozenset({S2CEvent.NEW_MESSAGE, S2CEvent.MESSAGE_EDITED})
