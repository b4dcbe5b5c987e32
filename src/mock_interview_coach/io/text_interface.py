"""
Text-based interview interface.

Provides a command-line interface for running a mock interview via text
input/output.
"""

from abc import ABC, abstractmethod

from mock_interview_coach.errors import InterviewError
from mock_interview_coach.orchestrator.schemas import Assessment, InterviewContext
from mock_interview_coach.orchestrator.session_state_machine import SessionStateMachine

QUIT_COMMANDS = ("quit", "exit")
HR_ROUND_TYPES = ("screening", "situational", "stress", "behavioral", "cultural-fit")


class InterviewInterface(ABC):
    """Abstract base class for interview interfaces."""

    @abstractmethod
    async def run(self) -> None:
        """Run the interview interface."""
        ...

    @abstractmethod
    async def send_message(self, message: str) -> None:
        """
        Send a message to the user.

        Args:
            message: Message to display.
        """
        ...

    @abstractmethod
    async def receive_input(self) -> str:
        """
        Receive input from the user.

        Returns:
            User's input string.
        """
        ...


class TextInterface(InterviewInterface):
    """
    Command-line text interface for mock interviews.

    Answers get immediate feedback. ``revise`` re-asks the last question,
    ``next`` moves on and ``submit`` ends the interview with an assessment.
    """

    def __init__(self, state_machine: SessionStateMachine) -> None:
        """
        Initialize the text interface.

        Args:
            state_machine: Session state machine to drive.
        """
        self._state_machine = state_machine

    async def run(self) -> None:
        """Run the interactive interview session."""
        print("\n" + "=" * 60)
        print("Welcome to the Mock Interview Coach")
        print("=" * 60 + "\n")

        context = await self._get_context()
        session_id = await self._state_machine.start(context)

        print("\n" + "-" * 60)
        print("Starting Interview")
        print("Commands: 'revise' to re-answer, 'next' for a new question, 'submit' to finish")
        print("-" * 60 + "\n")

        try:
            question = await self._state_machine.get_intro_question(session_id)
        except InterviewError as e:
            print(f"\n[{e.status_code}] {e.message}\n")
            print(f"Could not start the interview. Session ID: {session_id}")
            return
        await self.send_message(f"Interviewer: {question}")

        while True:
            candidate_input = (await self.receive_input()).strip()
            command = candidate_input.lower()

            if command in QUIT_COMMANDS:
                print("\nLeaving without submitting. Progress is saved.")
                print(f"Session ID: {session_id}")
                break

            if not candidate_input:
                continue

            try:
                if command == "submit":
                    print("\nAssessing your interview...")
                    result = await self._state_machine.submit(session_id)
                    await self._display_assessment(result.assessment)
                    break
                if command == "revise":
                    question = await self._state_machine.revise_answer(session_id)
                    await self.send_message(f"Interviewer (again): {question}")
                elif command == "next":
                    question = await self._state_machine.get_next_question(session_id)
                    await self.send_message(f"Interviewer: {question}")
                else:
                    feedback = await self._state_machine.post_answer(session_id, candidate_input)
                    await self.send_message(f"Feedback: {feedback}")
                    print("Type 'next', 'revise' or 'submit'.")
            except InterviewError as e:
                print(f"\n[{e.status_code}] {e.message}\n")

    async def send_message(self, message: str) -> None:
        """
        Display a message to the terminal.

        Args:
            message: Message to display.
        """
        print(f"\n{message}\n")

    async def receive_input(self) -> str:
        """
        Get input from the terminal.

        Returns:
            User's input string.
        """
        return await self._get_input("You: ")

    async def _get_input(self, prompt: str) -> str:
        try:
            return input(prompt)
        except EOFError:
            return "exit"

    async def _get_context(self) -> InterviewContext:
        """Ask which kind of interview to run."""
        print("Which interview would you like to practice?")
        print("  1. Domain-specific (skills)")
        print("  2. Domain-specific (job description)")
        print("  3. HR round")

        choice = (await self._get_input("\nChoice [1/2/3]: ")).strip()
        company_name = (await self._get_input("Company name (optional): ")).strip()
        job_role = (await self._get_input("Job role: ")).strip()

        fields: dict[str, object] = {"job_role": job_role}
        if company_name:
            fields["company_name"] = company_name

        if choice == "3":
            print(f"HR round types: {', '.join(HR_ROUND_TYPES)}")
            round_type = (await self._get_input("Round type [screening]: ")).strip().lower()
            fields["interview_type"] = "HR"
            fields["input_type"] = None
            fields["hr_round_type"] = round_type if round_type in HR_ROUND_TYPES else "screening"
        elif choice == "2":
            fields["input_type"] = "job-description"
            fields["job_description"] = await self._get_multiline("Paste the job description")
        else:
            fields["domain"] = (await self._get_input("Domain: ")).strip()
            skills = await self._get_input("Skills (comma separated): ")
            fields["skills"] = [s.strip() for s in skills.split(",") if s.strip()]

        return InterviewContext.model_validate(fields)

    async def _get_multiline(self, title: str) -> str:
        print(f"\n{title} below.")
        print("Enter a blank line when done:\n")

        lines: list[str] = []
        while True:
            line = await self._get_input("")
            if line == "exit" or (not line.strip() and lines):
                break
            lines.append(line)
        return "\n".join(lines).strip()

    async def _display_assessment(self, assessment: Assessment) -> None:
        """
        Display the final assessment.

        Args:
            assessment: Assessment to display.
        """
        print("\n" + "=" * 60)
        print("Interview Assessment")
        print("=" * 60)
        print(f"\nOverall Score: {assessment.overall_score}/100 ({assessment.level})")
        print(f"Response depth: {assessment.response_depth}")
        print(f"\n{assessment.summary}")

        if assessment.questions_analysis:
            print("\nPer-question analysis:")
            for i, analysis in enumerate(assessment.questions_analysis, 1):
                print(f"  {i}. {analysis.question}")
                print(f"     Score: {analysis.score:g}/10 - {analysis.feedback}")

        coaching = assessment.coaching_scores
        print("\nCoaching scores:")
        print(f"  Clarity of motivation:   {coaching.clarity_of_motivation:g}/5")
        print(f"  Specificity of learning: {coaching.specificity_of_learning:g}/5")
        print(f"  Career goal alignment:   {coaching.career_goal_alignment:g}/5")

        if assessment.recommendations:
            print("\nRecommendations:")
            for recommendation in assessment.recommendations:
                print(f"  - {recommendation}")

        print(f"\n{assessment.closure_message}")
        print("\n" + "=" * 60)
