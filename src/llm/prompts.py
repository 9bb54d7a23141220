"""
Prompt templates for the completion calls.

Templates are ``str.format`` strings; literal JSON braces are doubled.
"""

JSON_ONLY = "You ALWAYS respond with valid JSON only, with no additional commentary."

AUTOMATION_PROMPTS = {
    "system": f"""
You are a senior IT project manager and business analyst.
You turn raw requirements into a complete, consistent documentation pack and agile backlog.
{JSON_ONLY}
""",

    "user": """
Project Name: {project_name}
Jira Project Key: {jira_project_key}
Confluence Space Key: {confluence_space_key}
Priority Scheme: {priorities}

Raw Requirements:
{requirements}

Produce a BRD, an FRS, a SOW, a RAID log and a backlog of epics and user stories.

Return ONLY JSON with exactly this structure:

{{
  "meta": {{
    "projectName": "...",
    "jiraProjectKey": "...",
    "confluenceSpaceKey": "..."
  }},
  "docs": {{
    "brd": {{ "title": "...", "sections": [ {{ "h": "Section heading", "body": "Section text" }} ] }},
    "frs": {{ "title": "...", "sections": [ {{ "h": "...", "body": "..." }} ] }},
    "sow": {{ "title": "...", "sections": [ {{ "h": "...", "body": "..." }} ] }},
    "raid": {{
      "title": "...",
      "risks": [ {{ "item": "...", "owner": "...", "status": "Open", "mitigation": "..." }} ],
      "assumptions": [ {{ "item": "...", "owner": "...", "status": "Open" }} ],
      "issues": [ {{ "item": "...", "owner": "...", "status": "Open" }} ],
      "dependencies": [ {{ "item": "...", "owner": "...", "status": "Open" }} ]
    }},
    "backlogSummary": "..."
  }},
  "backlog": {{
    "epics": [ {{ "name": "Functional epic name", "description": "1-2 lines" }} ],
    "stories": [
      {{
        "epicName": "Functional epic name",
        "summary": "Short Jira summary",
        "story": "As a <role>, I want <capability> so that <business value>.",
        "acceptanceCriteria": ["Given ... when ... then ..."],
        "priority": "P2",
        "storyPoints": 3
      }}
    ]
  }},
  "notes": {{
    "assumptions": ["..."],
    "openQuestions": ["..."]
  }}
}}

Rules:
1. brd, frs and sow each have at least 4 sections, and every section has a non-empty "h" and "body".
2. risks, assumptions, issues and dependencies each have at least 2 entries.
3. storyPoints is one of 1, 2, 3, 5, 8, 13.
4. priority is one of {priorities}.
5. Every story's epicName is exactly the name of one epic. Epic names are functional, feature-based names.
6. Never leave anything empty. Where the requirements are silent, write sensible placeholder content
   and record each fabricated or missing piece of information in notes.assumptions.
""",
}

DRAFT_DOC_TYPE_INSTRUCTIONS = {
    "brd": """
Document type is BRD (Business Requirements Document).
Focus on business context, business objectives, scope, stakeholders, high-level business requirements,
assumptions and risks.
Stakeholders should include any business units, departments, roles or individuals mentioned in the text.
""",
    "frs": """
Document type is FRS (Functional Requirements Specification).
Interpret the requirements as system behaviour, data flows, integrations, interfaces and constraints,
but still map content into the fields below.
Stakeholders should include functional owners, consuming systems, user groups and any named departments.
""",
    "sow": """
Document type is SOW (Statement of Work).
Interpret the requirements in terms of deliverables, scope, responsibilities, timelines and assumptions,
but still map content into the fields below.
Stakeholders should reflect client organisation units, vendor teams, approvers and key contacts.
""",
    "raid": """
Document type is RAID (Risks, Assumptions, Issues, Dependencies).
Emphasise assumptions and risks; use objectives/inScope/outScope to summarise initiative framing.
Stakeholders reflect key owners and impacted parties.
""",
    "minutes": """
Document type is Minutes of Meeting.
Interpret background as meeting context, objectives as meeting objectives, inScope/outScope as topics
covered vs parked, stakeholders as attendees, highLevelReqs as action items and decisions, and
assumptions and risks as follow-ups or concerns.
""",
    "other": """
Treat this as a general project document.
Use sensible defaults for each field, and still detect stakeholders from the text.
""",
}

DRAFT_PROMPTS = {
    "system": f"""
You are an expert IT project manager and business analyst.
You write documentation in a concise, highly professional, consulting-style tone.
{JSON_ONLY}
""",

    "user": """
Project Name: {project_name}
Document Type: {doc_type}
{instructions}
Raw Requirements / Notes:
{requirements}

Tasks:
1. Clean and structure the raw requirements text.
2. Detect and extract stakeholders: business units, roles, user groups and named individuals.
3. Allocate content into these fields where relevant: cleanedRequirements, background, objectives,
   inScope, outScope, stakeholders, highLevelReqs, assumptions, risks.

Return ONLY JSON with this structure (omit fields that are not applicable):

{{
  "cleanedRequirements": "...",
  "background": "...",
  "objectives": "...",
  "inScope": "...",
  "outScope": "...",
  "stakeholders": "...",
  "highLevelReqs": "...",
  "assumptions": "...",
  "risks": "..."
}}
""",
}

USER_STORY_PROMPTS = {
    "system": f"""
You are an expert Product Owner and Business Analyst.
You create clear, well-structured agile user stories from BRDs and group them into epics.
You use FUNCTIONAL / FEATURE-BASED epic names (e.g. "Landing Page Content Management").
{JSON_ONLY}
""",

    "user": """
Project Name: {project_name}
Source Document Type: {doc_type}

Source BRD / Business Requirements Text:
{brd_text}

Tasks:
1. Generate agile user stories in the format "As a <role>, I want <capability> so that <business value>."
2. Group them into epics with functional, feature-based names (not release names).
3. Each user story belongs to exactly one epic.
4. Give every epic a short description (1-2 lines).
5. Keep language simple and suitable for a Jira backlog.

Return ONLY JSON in this form:

{{
  "epics": [ {{ "name": "Epic Name", "description": "Short epic description" }} ],
  "userStories": [ {{ "epic": "Epic Name", "story": "As a <role>, I want ..." }} ]
}}
""",
}

ESTIMATE_PROMPTS = {
    "system": f"""
You are an experienced Agile coach and Scrum practitioner.
You estimate story points using a Fibonacci-like scale: {{scale}}.
You consider complexity, uncertainty and effort, not hours.
{JSON_ONLY}
""",

    "user": """
Estimate story points for the following user stories.

User stories:
{stories}

For each user story select a story point from: {scale}. Do NOT explain your reasoning.
Return ONLY JSON with this structure:

{{
  "estimates": [ {{ "id": "US-1", "points": 3 }} ]
}}
""",
}

RETRO_PROMPTS = {
    "system": f"""
You are an experienced Scrum Master facilitating a sprint retrospective.
You group feedback into themes and turn problems into concrete, owned action items.
{JSON_ONLY}
""",

    "user": """
Team: {team_name}
Sprint: {sprint_name}

Raw retrospective feedback:
{feedback}

Return ONLY JSON with this structure:

{{
  "summary": "2-3 sentence overview",
  "wentWell": ["..."],
  "toImprove": ["..."],
  "actionItems": [ {{ "item": "...", "owner": "role or name" }} ],
  "themes": ["..."]
}}
""",
}

CODE_REVIEW_PROMPTS = {
    "system": f"""
You are a meticulous senior software engineer doing a code review.
You point out bugs, security problems, performance issues and maintainability concerns, and you
acknowledge what is done well.
{JSON_ONLY}
""",

    "user": """
Language: {language}
Review focus: {focus}

Code:
```
{code}
```

Return ONLY JSON with this structure:

{{
  "summary": "Overall assessment",
  "score": 7,
  "issues": [
    {{ "severity": "high|medium|low", "line": 12, "description": "...", "suggestion": "..." }}
  ],
  "strengths": ["..."]
}}

score is an integer from 1 (poor) to 10 (excellent).
""",
}

CHAT_PROMPTS = {
    "scrum": """
You are a friendly, pragmatic Scrum coach and project-management assistant.
Answer questions about agile ceremonies, backlog refinement, estimation, RAID management and
stakeholder communication. Keep answers short and practical.
""",

    "app": """
You are the in-app help assistant of the PM Doc Automation tool.
The tool drafts BRD/FRS/SOW/RAID documents from requirements, fills DOCX templates, generates user
stories and Excel backlogs with AI story points and sprint plans, e-mails generated files, and can
publish a documentation pack to Confluence and a backlog to Jira.
Explain how to use these features. Keep answers short.
""",
}
