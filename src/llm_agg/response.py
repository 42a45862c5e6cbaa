from openai import AsyncOpenAI


async def get_default_completion(
    log: list,
    model_name: str,
    client: AsyncOpenAI
):
    completion = await client.chat.completions.create(
        model=model_name,
        messages=log,
    )
    job = completion.choices[0].message.content
    if job is None:
        raise RuntimeError(
            f"Completion returned no result for model {model_name!r}. "
            "This typically indicates an empty API response "
            "or a parsing/formatting issue."
        )
    return job
