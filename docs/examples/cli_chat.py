import asyncio
import os

from dotenv import load_dotenv
from openai import AsyncOpenAI

from scene_agent.agent_core import (
    AgentConfig,
    AutoContinueController,
    ModelUnavailableError,
    ProgressEvent,
    ProgressPhase,
    ToolExecutionEngine,
    setup_logging,
)
from scene_agent.llm_impl import GenericOpenAI
from scene_agent.scene import InMemoryScene, build_scene_registry

# Load environment variables
load_dotenv()


def print_progress(event: ProgressEvent) -> None:
    if event.phase is ProgressPhase.START:
        print(f"  [{event.index + 1}/{event.total}] {event.tool_name} {event.args_summary}")
    elif event.phase is ProgressPhase.FAILURE:
        print(f"    failed: {event.message}")


async def main() -> None:
    """
    Main function to run the scene agent from the command line using OpenAI.
    """
    setup_logging()
    print("Welcome to the Scene Agent CLI (OpenAI)!")

    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        print("Error: OPENAI_API_KEY not found in environment variables.")
        return

    config = AgentConfig.from_env()
    client = AsyncOpenAI(api_key=api_key)
    llm = GenericOpenAI(client=client, model_name=os.getenv("OPENAI_MODEL", "gpt-4o-mini"))

    scene = InMemoryScene(position_limit=1000)
    engine = ToolExecutionEngine(
        build_scene_registry(), tool_timeout=config.tool_timeout, args_summary_limit=config.args_summary_limit
    )
    controller = AutoContinueController(llm, engine, scene, config=config, progress_sink=print_progress)

    print("\nDescribe a change to the scene. Type 'exit' or 'quit' to stop, 'scene' to print it.")
    while True:
        user_input = input("\nYou: ").strip()
        if user_input.lower() in ["exit", "quit"]:
            print("Goodbye!")
            break

        if not user_input:
            continue

        if user_input.lower() == "scene":
            print(scene.invoke("get_scene_info", {}).message)
            continue

        try:
            summary = await controller.run(user_input)
        except ModelUnavailableError as e:
            print(f"The model is unavailable: {e}")
            continue

        print(f"Assistant: {summary.final_text}")
        print(summary.render())


if __name__ == "__main__":
    asyncio.run(main())
