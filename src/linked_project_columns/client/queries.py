"""GraphQL documents for the GitHub classic projects API."""

CARD_PAGE_SIZE = 50
LABEL_LIMIT = 20

PROJECT_CARD_CONTENT_FIELDS = f"""
id
title
state
body
labels(first: {LABEL_LIMIT}) {{
  nodes {{
    name
  }}
}}
""".strip()

PROJECT_CARD_FIELDS = f"""
id
note
content {{
  ... on Issue {{
    {PROJECT_CARD_CONTENT_FIELDS}
  }}
  ... on PullRequest {{
    {PROJECT_CARD_CONTENT_FIELDS}
  }}
}}
""".strip()

PROJECT_COLUMN_FIELDS = f"""
id
name
url
project {{
  name
  url
}}
cards(first: {CARD_PAGE_SIZE}, archivedStates: [NOT_ARCHIVED], after: $after) {{
  nodes {{
    {PROJECT_CARD_FIELDS}
  }}
  pageInfo {{
    hasNextPage
    endCursor
  }}
}}
""".strip()

GET_PROJECT_COLUMNS = f"""
query($sourceColumnIds: [ID!]!, $targetColumnId: ID!, $after: String) {{
  sourceColumns: nodes(ids: $sourceColumnIds) {{
    ... on ProjectColumn {{
      {PROJECT_COLUMN_FIELDS}
    }}
  }}
  targetColumn: node(id: $targetColumnId) {{
    ... on ProjectColumn {{
      {PROJECT_COLUMN_FIELDS}
    }}
  }}
}}
""".strip()

GET_SINGLE_PROJECT_COLUMN = f"""
query($id: ID!, $after: String) {{
  column: node(id: $id) {{
    ... on ProjectColumn {{
      {PROJECT_COLUMN_FIELDS}
    }}
  }}
}}
""".strip()

ADD_PROJECT_CARD = f"""
mutation addProjectCard($columnId: ID!, $contentId: ID, $note: String) {{
  addProjectCard(input: {{ projectColumnId: $columnId, contentId: $contentId, note: $note }}) {{
    cardEdge {{
      node {{
        {PROJECT_CARD_FIELDS}
      }}
    }}
  }}
}}
""".strip()

MOVE_PROJECT_CARD = f"""
mutation moveProjectCard($cardId: ID!, $columnId: ID!, $afterCardId: ID) {{
  moveProjectCard(input: {{ cardId: $cardId, columnId: $columnId, afterCardId: $afterCardId }}) {{
    cardEdge {{
      node {{
        {PROJECT_CARD_FIELDS}
      }}
    }}
  }}
}}
""".strip()

DELETE_PROJECT_CARD = """
mutation deleteProjectCard($cardId: ID!) {
  deleteProjectCard(input: { cardId: $cardId }) {
    deletedCardId
  }
}
""".strip()
