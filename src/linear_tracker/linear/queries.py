"""GraphQL query templates for the Linear API."""

# Fields shared by every issue query (children carry only their state)
ISSUE_FIELDS = """
fragment IssueFields on Issue {
  id
  identifier
  title
  description
  priority
  state {
    id
    name
    type
  }
  labels {
    nodes {
      id
      name
    }
  }
  assignee {
    id
    name
    email
  }
  parent {
    id
    identifier
    title
  }
  children {
    nodes {
      id
      identifier
      title
      state {
        id
        name
        type
      }
    }
  }
  project {
    id
    name
  }
  createdAt
  updatedAt
}
"""

# Query to get the authenticated user
GET_VIEWER = """
query GetViewer {
  viewer {
    id
    name
    email
  }
}
"""

# Query to get a team's workflow states
GET_TEAM_STATES = """
query GetTeamStates($id: String!) {
  team(id: $id) {
    id
    name
    key
    states {
      nodes {
        id
        name
        type
      }
    }
  }
}
"""

# Query to get a page of project issues carrying a label
GET_ISSUES_BY_LABEL = (
    """
query GetIssuesByLabel($projectId: ID!, $labelName: String!, $first: Int!, $after: String) {
  issues(
    filter: {
      project: { id: { eq: $projectId } }
      labels: { name: { eq: $labelName } }
    }
    first: $first
    after: $after
  ) {
    nodes {
      ...IssueFields
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""
    + ISSUE_FIELDS
)

# Query to get a page of project epics (issues labelled "epic")
GET_EPICS = (
    """
query GetEpics($projectId: ID!, $first: Int!, $after: String) {
  issues(
    filter: {
      project: { id: { eq: $projectId } }
      labels: { name: { in: ["epic", "Epic"] } }
    }
    first: $first
    after: $after
  ) {
    nodes {
      ...IssueFields
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""
    + ISSUE_FIELDS
)

# Query to get a single issue
GET_ISSUE = (
    """
query GetIssue($id: String!) {
  issue(id: $id) {
    ...IssueFields
  }
}
"""
    + ISSUE_FIELDS
)

# Mutation to update issue state, assignee, labels or description
UPDATE_ISSUE = (
    """
mutation UpdateIssue($id: String!, $input: IssueUpdateInput!) {
  issueUpdate(id: $id, input: $input) {
    success
    issue {
      ...IssueFields
    }
  }
}
"""
    + ISSUE_FIELDS
)

# Mutation to add a comment to an issue
CREATE_COMMENT = """
mutation CreateComment($issueId: String!, $body: String!) {
  commentCreate(input: { issueId: $issueId, body: $body }) {
    success
  }
}
"""
