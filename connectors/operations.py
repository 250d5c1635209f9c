"""
Именованные операции RemoteStore и их GraphQL-документы (схема в стиле Hasura).
"""

from typing import Dict

FETCH_BOARD_DATA = "FetchBoardData"
CREATE_LIST = "CreateList"
UPDATE_LIST = "UpdateList"
ARCHIVE_LIST = "ArchiveList"
BATCH_UPDATE_LIST_POSITIONS = "BatchUpdateListPositions"
CREATE_CARD = "CreateCard"
UPDATE_CARD_FIELDS = "UpdateCardFields"
UPDATE_CARD_POSITION = "UpdateCardPosition"
BATCH_UPDATE_POSITIONS = "BatchUpdatePositions"
ARCHIVE_CARD = "ArchiveCard"
GET_CARD_MEMBERS = "GetCardMembers"
ADD_CARD_MEMBER = "AddCardMember"
REMOVE_CARD_MEMBER = "RemoveCardMember"
DELETE_ATTACHMENT = "DeleteAttachment"

# Корневые поля ответов
RESULT_KEYS: Dict[str, str] = {
    CREATE_LIST: "insert_kanban_lists_one",
    UPDATE_LIST: "update_kanban_lists_by_pk",
    ARCHIVE_LIST: "update_kanban_lists_by_pk",
    BATCH_UPDATE_LIST_POSITIONS: "update_kanban_lists_many",
    CREATE_CARD: "insert_kanban_cards_one",
    UPDATE_CARD_FIELDS: "update_kanban_cards_by_pk",
    UPDATE_CARD_POSITION: "update_kanban_cards_by_pk",
    BATCH_UPDATE_POSITIONS: "update_kanban_cards_many",
    ARCHIVE_CARD: "update_kanban_cards_by_pk",
    GET_CARD_MEMBERS: "kanban_card_members",
    ADD_CARD_MEMBER: "insert_kanban_card_members_one",
    REMOVE_CARD_MEMBER: "delete_kanban_card_members_by_pk",
    DELETE_ATTACHMENT: "delete_kanban_attachments_by_pk",
}

_MEMBER_FIELDS = """
    id
    card_id
    user_id
    assigned_at
    user {
      id
      fullname
      avatar_url
    }
"""

_CARD_FIELDS = """
    id
    title
    description
    cover_color
    cover_image_url
    due_date
    story_points
    priority
    is_archived
    is_completed
    created_at
    created_by
    position
    list_id
"""

DOCUMENTS: Dict[str, str] = {
    FETCH_BOARD_DATA: f"""
query FetchBoardData($board_id: uuid!) {{
  kanban_boards(where: {{id: {{_eq: $board_id}}}}) {{
    id
    name
    description
    background_color
    background_image_url
  }}
  kanban_lists(
    where: {{board_id: {{_eq: $board_id}}, is_archived: {{_eq: false}}}},
    order_by: {{position: asc}}
  ) {{
    id
    name
    position
    board_id
    is_archived
    created_at
    updated_at
    created_by
    color
    confetti
    is_final
    kanban_cards(where: {{is_archived: {{_eq: false}}}}, order_by: {{position: asc}}) {{
      {_CARD_FIELDS}
      kanban_card_members_aggregate {{ aggregate {{ count }} }}
      kanban_card_members {{ {_MEMBER_FIELDS} }}
      kanban_attachments_aggregate {{ aggregate {{ count }} }}
      kanban_attachments {{
        id
        card_id
        filename
        original_filename
        mime_type
        file_size
        url
        uploaded_by
        created_at
      }}
      kanban_card_comments {{ id }}
      kanban_card_tags {{ tag_id }}
    }}
  }}
}}
""",
    CREATE_LIST: """
mutation CreateList($board_id: uuid!, $name: String!, $position: Int!, $color: String, $created_by: uuid!) {
  insert_kanban_lists_one(object: {
    board_id: $board_id, name: $name, position: $position,
    color: $color, created_by: $created_by, is_archived: false
  }) {
    id
    name
    position
    board_id
    is_archived
    created_at
    updated_at
    created_by
    color
    confetti
    is_final
  }
}
""",
    UPDATE_LIST: """
mutation UpdateList($id: uuid!, $changes: kanban_lists_set_input!) {
  update_kanban_lists_by_pk(pk_columns: {id: $id}, _set: $changes) {
    id
    name
    color
    confetti
    is_final
  }
}
""",
    ARCHIVE_LIST: """
mutation ArchiveList($id: uuid!) {
  update_kanban_lists_by_pk(pk_columns: {id: $id}, _set: {is_archived: true}) {
    id
    is_archived
  }
}
""",
    BATCH_UPDATE_LIST_POSITIONS: """
mutation BatchUpdateListPositions($updates: [kanban_lists_updates!]!) {
  update_kanban_lists_many(updates: $updates) {
    affected_rows
  }
}
""",
    CREATE_CARD: f"""
mutation CreateCard($list_id: uuid!, $title: String!, $position: Int!, $created_by: uuid!) {{
  insert_kanban_cards_one(object: {{
    list_id: $list_id, title: $title, position: $position,
    created_by: $created_by, is_archived: false
  }}) {{
    {_CARD_FIELDS}
  }}
}}
""",
    UPDATE_CARD_FIELDS: f"""
mutation UpdateCardFields($id: uuid!, $changes: kanban_cards_set_input!) {{
  update_kanban_cards_by_pk(pk_columns: {{id: $id}}, _set: $changes) {{
    {_CARD_FIELDS}
  }}
}}
""",
    UPDATE_CARD_POSITION: """
mutation UpdateCardPosition($id: uuid!, $changes: kanban_cards_set_input!) {
  update_kanban_cards_by_pk(pk_columns: {id: $id}, _set: $changes) {
    id
    list_id
    position
    is_completed
  }
}
""",
    BATCH_UPDATE_POSITIONS: """
mutation BatchUpdatePositions($updates: [kanban_cards_updates!]!) {
  update_kanban_cards_many(updates: $updates) {
    affected_rows
  }
}
""",
    ARCHIVE_CARD: """
mutation ArchiveCard($id: uuid!) {
  update_kanban_cards_by_pk(pk_columns: {id: $id}, _set: {is_archived: true}) {
    id
    is_archived
  }
}
""",
    GET_CARD_MEMBERS: f"""
query GetCardMembers($card_id: uuid!) {{
  kanban_card_members(where: {{card_id: {{_eq: $card_id}}}}) {{
    {_MEMBER_FIELDS}
  }}
}}
""",
    ADD_CARD_MEMBER: f"""
mutation AddCardMember($card_id: uuid!, $user_id: uuid!) {{
  insert_kanban_card_members_one(object: {{card_id: $card_id, user_id: $user_id}}) {{
    {_MEMBER_FIELDS}
  }}
}}
""",
    REMOVE_CARD_MEMBER: """
mutation RemoveCardMember($id: uuid!) {
  delete_kanban_card_members_by_pk(id: $id) {
    id
  }
}
""",
    DELETE_ATTACHMENT: """
mutation DeleteAttachment($id: uuid!) {
  delete_kanban_attachments_by_pk(id: $id) {
    id
  }
}
""",
}
