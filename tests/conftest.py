"""Pytest configuration and shared fixtures."""

import pytest
from pathlib import Path

from csnav.config import Config
from csnav.navigator import Navigator
from csnav.workspace import WorkspaceCache, load_workspace


SOLUTION = """\
Microsoft Visual Studio Solution File, Format Version 12.00
# Visual Studio Version 17
Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "SampleProject", "SampleProject\\SampleProject.csproj", "{11111111-1111-1111-1111-111111111111}"
EndProject
Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "SampleApp", "SampleApp\\SampleApp.csproj", "{22222222-2222-2222-2222-222222222222}"
EndProject
Project("{2150E333-8FDC-42A3-9474-1A3956D46DE8}") = "Solution Items", "Solution Items", "{33333333-3333-3333-3333-333333333333}"
EndProject
Global
EndGlobal
"""

SAMPLE_PROJECT = """\
<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
    <Nullable>enable</Nullable>
  </PropertyGroup>
</Project>
"""

SAMPLE_APP_PROJECT = """\
<Project Sdk="Microsoft.NET.Sdk">
  <ItemGroup>
    <ProjectReference Include="..\\SampleProject\\SampleProject.csproj" />
  </ItemGroup>
</Project>
"""

CALCULATOR = """\
namespace SampleProject.Services;

/// <summary>
/// Basic arithmetic.
/// </summary>
public interface ICalculator
{
    int Add(int a, int b);
    int Subtract(int a, int b);
}

public class Calculator : ICalculator
{
    private readonly ILogger _logger;

    public Calculator(ILogger logger)
    {
        _logger = logger;
    }

    public Calculator() : this(new ConsoleLogger())
    {
    }

    public virtual int Add(int a, int b)
    {
        _logger.Log("adding");
        return a + b;
    }

    public virtual int Subtract(int a, int b)
    {
        return a - b;
    }

    [Obsolete("Use Add instead")]
    public int Sum(int a, int b) => Add(a, b);
}

public class ScientificCalculator : Calculator
{
    public ScientificCalculator(ILogger logger) : base(logger)
    {
    }

    // Delegates to the basic implementation
    public override int Add(int a, int b)
    {
        var result = base.Add(a, b);
        return result;
    }

    public double Power(double value, double exponent)
    {
        return Math.Pow(value, exponent);
    }
}

public struct FastCalculator : ICalculator
{
    public int Add(int a, int b) => a + b;
    public int Subtract(int a, int b) => a - b;
}

public abstract class BaseProcessor
{
    public abstract void Process(string input);

    public virtual void Initialize()
    {
    }

    public void Start()
    {
        Initialize();
    }

    public static void Reset()
    {
    }
}

public class TextProcessor : BaseProcessor
{
    public override void Process(string input)
    {
    }

    public sealed override void Initialize()
    {
    }
}
"""

APPLICATION = """\
namespace SampleProject.Services;

public class Application
{
    private readonly ICalculator _calculator;
    private readonly UserService _userService;

    public Application()
    {
        var logger = new ConsoleLogger();
        _calculator = new Calculator(logger);
        _userService = new UserService(logger);
    }

    public void Run()
    {
        var total = _calculator.Add(5, 3);
        var difference = _calculator.Subtract(10, 4);
    }
}

public static class MathHelper
{
    public static int ComputeSum(int[] numbers)
    {
        var calc = new Calculator();
        var result = 0;
        foreach (var num in numbers)
        {
            result = calc.Add(result, num);
        }
        return result;
    }

    public static Calculator CreateCalculator()
    {
        return new Calculator(new ConsoleLogger());
    }
}
"""

USER_SERVICE = """\
using SampleProject.Models;

namespace SampleProject.Services;

public class UserService
{
    private readonly List<User> _users = new();
    private readonly ILogger _logger;

    public UserService(ILogger logger)
    {
        _logger = logger;
    }

    public IEnumerable<ILogger> Sinks { get; } = new List<ILogger>();

    public async Task<User?> GetUserAsync(int id)
    {
        await Task.Delay(10);
        return _users.FirstOrDefault(u => u.Id == id);
    }

    public User CreateUser(string name)
    {
        var user = new User { Id = _users.Count + 1, Name = name };
        _users.Add(user);
        _logger.Log($"Created {user.Name}");
        return user;
    }

    public int UserCount => _users.Count;
}

public interface ILogger
{
    void Log(string message);
}

public class ConsoleLogger : ILogger
{
    public void Log(string message)
    {
        Console.WriteLine(message);
    }
}
"""

USER = """\
namespace SampleProject.Models;

public class User
{
    public int Id { get; set; }
    public string Name { get; init; } = string.Empty;
    public string DisplayName => Name;
    public UserRole Role { get; private set; }
}

public enum UserRole
{
    Guest,
    Admin
}
"""

PROGRAM = """\
using SampleProject.Services;

namespace SampleProject;

public class Program
{
    public static void Main(string[] args)
    {
        Calculator calculator = new();
        calculator.Subtract(9, 4);
    }
}
"""

CALCULATOR_STEPS = """\
namespace SampleProject.Steps;

public class CalculatorSteps
{
    private int _result;

    [Given("I have entered (.*) into the calculator")]
    public void GivenIHaveEntered(int number)
    {
        _result = number;
    }

    [When(@"I press ""add""\")]
    public void WhenIPressAdd()
    {
        _result += 1;
    }

    [Then("the result should be (.*) on the screen")]
    public void ThenTheResultShouldBe(int expected)
    {
    }

    [Reqnroll.StepDefinition("the calculator is cleared")]
    public void ClearCalculator()
    {
    }

    [Obsolete("old calculator step")]
    public void NotAStep()
    {
    }
}
"""

RUNNER = """\
using SampleProject.Services;

namespace SampleApp;

public class Runner
{
    public int Run()
    {
        var calc = new Calculator();
        return calc.Add(1, 2);
    }
}
"""

GLOBAL_HELPER = """\
public class GlobalHelper
{
    public void Help()
    {
    }
}
"""

GENERATED = """\
namespace SampleProject;

public class Calculator
{
}
"""

CALCULATOR_FEATURE = """\
Feature: Calculator
  Simple arithmetic

  Scenario: Add two numbers
    Given I have entered 50 into the calculator
    When I press add
    Then the result should be 120 on the screen

  Scenario Outline: Subtract numbers
    Given I have entered <a> into the calculator

    Examples:
      | a |
      | 1 |
"""

PORTUGUESE_FEATURE = """\
# language: pt
Funcionalidade: Cadastro de usuário

  Cenário: Criar usuário
    Dado um usuário

  Esquema do Cenário: Remover usuário
    Dado um usuário <nome>
"""

NOTES_FEATURE = """\
Just some notes about scenarios.
Scenario: orphaned
"""


def write_files(root: Path, files: dict) -> Path:
    """Write {relative path: content} under root and return root."""
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def sample_solution(tmp_path: Path) -> Path:
    """A two-project solution; SampleApp references SampleProject."""
    root = write_files(tmp_path / "sample", {
        "SampleSolution.sln": SOLUTION,
        "SampleProject/SampleProject.csproj": SAMPLE_PROJECT,
        "SampleProject/Services/Calculator.cs": CALCULATOR,
        "SampleProject/Services/Application.cs": APPLICATION,
        "SampleProject/Services/UserService.cs": USER_SERVICE,
        "SampleProject/Models/User.cs": USER,
        "SampleProject/Program.cs": PROGRAM,
        "SampleProject/Steps/CalculatorSteps.cs": CALCULATOR_STEPS,
        "SampleProject/obj/Debug/Generated.cs": GENERATED,
        "SampleProject/Features/Calculator.feature": CALCULATOR_FEATURE,
        "SampleProject/Features/pt/Usuario.feature": PORTUGUESE_FEATURE,
        "SampleProject/Features/notes.feature": NOTES_FEATURE,
        "SampleApp/SampleApp.csproj": SAMPLE_APP_PROJECT,
        "SampleApp/Runner.cs": RUNNER,
        "SampleApp/GlobalHelper.cs": GLOBAL_HELPER,
    })
    return root / "SampleSolution.sln"


@pytest.fixture
def source_dir(tmp_path: Path):
    """Factory for a project-less directory of C# files."""
    def _make(files: dict) -> Path:
        return write_files(tmp_path / "src", files)
    return _make


@pytest.fixture
def config() -> Config:
    """Provide a test configuration."""
    return Config()


@pytest.fixture
def workspace(sample_solution, config):
    """The sample solution, loaded."""
    return load_workspace(str(sample_solution), config)


@pytest.fixture
def navigator(config) -> Navigator:
    """Navigator with its own cache."""
    return Navigator(cache=WorkspaceCache(config), config=config)


@pytest.fixture
def line_of():
    """1-based line number of the first line of content containing needle."""
    def _line_of(content: str, needle: str) -> int:
        for number, line in enumerate(content.splitlines(), start=1):
            if needle in line:
                return number
        raise AssertionError(f"{needle!r} not in content")
    return _line_of
