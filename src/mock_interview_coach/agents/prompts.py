"""
System instructions sent to the text generator.

Instructions are chosen from the session's interview context.
"""

from mock_interview_coach.orchestrator.schemas import InterviewContext

INTRO_INPUT = "Start the interview with an introductory greeting and first question."
NEXT_QUESTION_INPUT = "Generate the next question based on the conversation history."

ASSESSMENT_INSTRUCTION = """You are a JSON assessment generator. You MUST respond with ONLY a valid JSON object, nothing else.

Rules:
1. Start with an opening brace and end with a closing brace.
2. No conversational text, markdown or commentary before or after the JSON.
3. Analyse EVERY question-answer pair below ({pair_count} in total). Do not skip any, even if an answer is vague or poor.

Required JSON structure:
- summary: string describing overall performance
- response_depth: exactly "Novice", "Intermediate" or "Advanced" (overall depth)
- questions_analysis: array of objects, each with
  * question: the actual question asked
  * response: the candidate's actual response
  * feedback: assessment of the response, addressing the candidate as "you"
  * strengths: array of strings
  * improvements: array of strings
  * score: number between 0 and 10
  * response_depth: exactly "Novice", "Intermediate" or "Advanced"
- coaching_scores: object with numbers between 1 and 5:
  * clarity_of_motivation
  * specificity_of_learning
  * career_goal_alignment
- recommendations: array of strings
- closure_message: final message to the candidate

Extract real questions and responses from the pairs; do not invent content.
The question-answer pairs follow in the user message."""


def _role_clause(context: InterviewContext) -> str:
    if not context.job_role or context.job_role == "Other":
        return ""
    return f" for the position of {context.job_role}"


def intro_instruction(context: InterviewContext) -> str:
    """Instruction for the greeting and the candidate introduction question."""
    if context.interview_type == "HR":
        round_type = context.hr_round_type or "screening"
        return (
            f"You are an HR interviewer from {context.company_name} running a {round_type} "
            "round of a mock interview. Greet the candidate, introduce yourself briefly and "
            "ask them to introduce themselves. Ask nothing else yet. Keep a natural, kind tone "
            'and do not use tags like "Interviewer:".'
        )

    focus = f" focused on {context.domain}" if context.domain else ""
    skills = ", ".join(context.skills) if context.skills else "not specified"
    return (
        f"You are an interviewer from {context.company_name}{_role_clause(context)}, "
        f"conducting a mock interview{focus}. The candidate's skills: {skills}. "
        "Greet the candidate, introduce yourself, make a little friendly conversation and "
        "ask for their introduction. Ask nothing else yet. Keep a natural, kind tone and "
        'do not use tags like "Interviewer:".'
    )


def question_instruction(context: InterviewContext) -> str:
    """Instruction for the next interview question."""
    if context.interview_type == "HR":
        round_type = context.hr_round_type or "screening"
        return (
            f"You are an HR interviewer conducting a {round_type} round of a mock interview. "
            "Ask exactly one new question that fits this round, linked to the candidate's "
            "previous answers where possible. Never repeat a question."
        )

    if context.input_type == "job-description" and context.job_description:
        basis = f"the following job description:\n{context.job_description}\n"
    else:
        skills = ", ".join(context.skills) if context.skills else "not specified"
        basis = f"a role requiring these skills: {skills}. "
    return (
        f"You are an interviewer conducting a mock interview for {basis}"
        f"The domain is {context.domain or 'not specified'}. "
        "Do not ask for the introduction again. Ask exactly one role- or domain-specific "
        "question, conversational in tone, linked to the candidate's last answer where "
        'possible. Never repeat a question. Do not use tags like "Interviewer:".'
    )


def feedback_instruction(context: InterviewContext) -> str:
    """Instruction for coaching feedback on the latest answer."""
    domain_note = (
        f" If the answer is clearly outside {context.domain}, gently point it out."
        if context.domain and context.interview_type != "HR"
        else ""
    )
    return (
        "You are a coach giving personalized, constructive feedback on the candidate's latest "
        f"answer in a mock interview{_role_clause(context)}. Use four parts on separate lines: "
        "an acknowledgement, **Strengths**, **Areas of improvement** and **Better version could be** "
        f"(a short, natural spoken answer).{domain_note} Be encouraging but honest and do not "
        "ask any questions."
    )


def assessment_instruction(pair_count: int) -> str:
    """Instruction demanding a single JSON assessment object."""
    return ASSESSMENT_INSTRUCTION.format(pair_count=pair_count)
